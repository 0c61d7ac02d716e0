import asyncio
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from relay.api.deps import get_push_client, get_push_limit, get_settings
from relay.config import Settings
from relay.logging_config import get_logger, set_context
from relay.models.response import PushResponse, error_body
from relay.models.schemas import PushRequest
from relay.services.apns_client import ApnsClient
from relay.services.push_dispatcher import dispatch_push

router = APIRouter(tags=["push"])
logger = get_logger(__name__)


@router.post("/send-apn", response_model=PushResponse)
async def send_apn(
    request: Optional[PushRequest] = Body(None),
    client: ApnsClient = Depends(get_push_client),
    settings: Settings = Depends(get_settings),
    limit: asyncio.Semaphore = Depends(get_push_limit)
):
    """Fan a push notification out to every token in the request"""
    set_context(channel="push")
    logger.info("📩 Incoming push request")
    try:
        batch = await dispatch_push(
            client,
            request or PushRequest(),
            topic=settings.apn_bundle_id or None,
            limit=limit,
        )
    except Exception as e:
        logger.error(f"❌ Error in /send-apn: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=error_body(str(e)))

    return PushResponse(
        success=True,
        duration=batch.duration,
        sent=batch.sent,
        failed=batch.failed,
    )
