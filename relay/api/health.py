from pathlib import Path

from fastapi import APIRouter, Depends

from relay.api.deps import get_push_client, get_settings
from relay.config import Settings
from relay.logging_config import get_logger
from relay.services.apns_client import ApnsClient

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health")
async def health_check(
    client: ApnsClient = Depends(get_push_client),
    settings: Settings = Depends(get_settings)
):
    """
    Report how the relay is wired.
    Nothing is sent; the push gateway is only contacted on real deliveries.
    """
    template_dir = Path(settings.template_dir)
    health_data = {
        "service": settings.service_name,
        "apns_host": client.host,
        "apns_topic": client.default_topic,
        "apns_credentials": client.has_credentials,
        "templates": template_dir.is_dir(),
        "push_concurrency": settings.push_concurrency,
    }
    healthy = health_data["apns_credentials"] and health_data["templates"]
    if not healthy:
        logger.warning(f"Health check degraded: {health_data}")
    return {"status": "healthy" if healthy else "degraded", **health_data}
