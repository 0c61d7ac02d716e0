from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from relay.api.deps import get_email_dispatcher
from relay.errors import InvalidTemplateError, MissingParamsError
from relay.logging_config import get_logger, set_context
from relay.models.response import EmailResponse, error_body
from relay.models.schemas import EmailRequest
from relay.services.email_dispatcher import EmailDispatcher

router = APIRouter(tags=["email"])
logger = get_logger(__name__)


@router.post("/send-email", response_model=EmailResponse)
async def send_email(
    request: Optional[EmailRequest] = Body(None),
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher)
):
    """Render a template and send it with the caller's SMTP account"""
    set_context(channel="email")
    try:
        await dispatcher.send(request or EmailRequest())
    except (MissingParamsError, InvalidTemplateError) as e:
        logger.warning(f"Rejected email request: {e}")
        return JSONResponse(status_code=400, content=error_body(str(e)))
    except Exception as e:
        logger.error(f"❌ Email worker error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=error_body(str(e)))

    return EmailResponse(success=True)
