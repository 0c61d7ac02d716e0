import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from relay.models.schemas import Notification
from relay.services.apns_client import SOCKET_ERROR

logger = logging.getLogger(__name__)

MAX_RETRIES = 1


class DeliveryOutcome(str, Enum):
    DELIVERED = "delivered"
    RETRIED_THEN_DELIVERED = "retried_then_delivered"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    token: str
    outcome: DeliveryOutcome
    attempts: int
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.outcome != DeliveryOutcome.FAILED


def is_transient(exc: BaseException) -> bool:
    """Socket-level failures are worth one more try; gateway rejections are not"""
    return getattr(exc, "code", None) == SOCKET_ERROR or "socket" in str(exc)


async def deliver(
    client,
    notification: Notification,
    attempts_remaining: int = MAX_RETRIES,
    _attempt: int = 1
) -> DeliveryResult:
    """
    Send one notification, retrying once after a transient socket failure.

    Never raises: a terminal failure is logged and reported as
    DeliveryOutcome.FAILED.
    """
    token = notification.device_token
    try:
        await client.send(notification)
    except Exception as e:
        if attempts_remaining > 0 and is_transient(e):
            logger.warning(f"🔁 Retrying APNs send to {token[:20]} after socket error: {e}")
            return await deliver(client, notification, attempts_remaining - 1, _attempt + 1)

        logger.error(f"❌ APNs send error for {token[:20]} after {_attempt} attempt(s): {e}")
        return DeliveryResult(
            token=token,
            outcome=DeliveryOutcome.FAILED,
            attempts=_attempt,
            error=str(e),
        )

    outcome = DeliveryOutcome.DELIVERED if _attempt == 1 else DeliveryOutcome.RETRIED_THEN_DELIVERED
    return DeliveryResult(token=token, outcome=outcome, attempts=_attempt)
