import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from relay import __version__
from relay.api.auth import authorization_gate, request_context
from relay.api.email import router as email_router
from relay.api.health import router as health_router
from relay.api.push import router as push_router
from relay.config import Settings, settings as default_settings
from relay.logging_config import configure_logging, get_logger
from relay.models.response import error_body
from relay.services.apns_client import ApnsClient
from relay.services.email_dispatcher import EmailDispatcher

logger = get_logger(__name__)


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Log exceptions from tasks nobody awaited instead of losing them"""
    exc = context.get("exception")
    logger.error(
        f"🚨 Unhandled exception in event loop: {context.get('message')}",
        exc_info=exc,
    )


def build_push_client(settings: Settings) -> ApnsClient:
    return ApnsClient(
        team_id=settings.apn_team_id,
        key_id=settings.apn_key_id,
        signing_key=settings.apn_private_key,
        default_topic=settings.apn_bundle_id or None,
        host=settings.apn_host,
        request_timeout=settings.apn_request_timeout,
    )


def build_email_dispatcher(settings: Settings) -> EmailDispatcher:
    return EmailDispatcher(
        template_dir=settings.template_dir,
        app_name=settings.app_name,
        calendar_base_url=settings.calendar_base_url,
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        start_tls=settings.smtp_start_tls,
        timeout=settings.smtp_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler"""
    settings = app.state.settings
    logger.info(f"🚀 Starting {settings.service_name} on port {settings.port}")
    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(_log_loop_exception)

    # Clients injected before startup (tests) are left alone
    owns_push_client = getattr(app.state, "push_client", None) is None
    if owns_push_client:
        app.state.push_client = build_push_client(settings)
    if getattr(app.state, "email_dispatcher", None) is None:
        app.state.email_dispatcher = build_email_dispatcher(settings)

    yield

    logger.info(f"🛑 Shutting down {settings.service_name}")
    if owns_push_client:
        await app.state.push_client.close()
        app.state.push_client = None
    loop.set_exception_handler(previous_handler)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.warning(f"Malformed request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content=error_body(message))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error in {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=error_body(str(exc)))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.service_name,
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.push_client = None
    app.state.email_dispatcher = None
    # One bound across all concurrent /send-apn batches
    app.state.push_limit = asyncio.Semaphore(settings.push_concurrency)

    # Last added runs first: request ids are assigned before the auth check
    app.middleware("http")(authorization_gate)
    app.middleware("http")(request_context)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/")
    def index():
        return {"message": "Notification relay running"}

    app.include_router(push_router)
    app.include_router(email_router)
    app.include_router(health_router)
    return app


app = create_app()
