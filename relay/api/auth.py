"""
Shared-secret authorization for every route.
"""

import hmac
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from relay.logging_config import clear_context, get_logger, set_context
from relay.models.response import error_body

logger = get_logger(__name__)


def is_authorized(header: str, secret: str) -> bool:
    """Exact match against "Bearer <secret>"; an empty secret admits nobody"""
    if not secret or header is None:
        return False
    return hmac.compare_digest(header.encode(), f"Bearer {secret}".encode())


async def authorization_gate(request: Request, call_next):
    """Reject the request with 403 unless it carries the shared bearer secret"""
    secret = request.app.state.settings.worker_secret
    if not is_authorized(request.headers.get("authorization"), secret):
        logger.warning(f"🚫 Unauthorized request blocked: {request.method} {request.url.path}")
        return JSONResponse(status_code=403, content=error_body("Forbidden"))
    return await call_next(request)


async def request_context(request: Request, call_next):
    """Tag every log line of a request with its request id"""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    clear_context()
    set_context(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        clear_context()
    response.headers["X-Request-ID"] = request_id
    return response
