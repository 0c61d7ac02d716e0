import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from relay.errors import MissingTokensError
from relay.models.schemas import PushRequest
from relay.services.notifications import build_notification
from relay.services.retry import DeliveryResult, deliver

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 100


@dataclass
class PushBatchResult:
    results: List[DeliveryResult] = field(default_factory=list)
    duration: str = "0.00"

    @property
    def sent(self) -> int:
        return sum(1 for r in self.results if r.delivered)

    @property
    def failed(self) -> int:
        return len(self.results) - self.sent


async def dispatch_push(
    client,
    request: PushRequest,
    topic: Optional[str] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    limit: Optional[asyncio.Semaphore] = None
) -> PushBatchResult:
    """
    Deliver one notification per token and wait until all of them settle.

    In-flight deliveries are bounded by `limit` when given (shared across
    batches), otherwise by a per-batch semaphore of size `concurrency`.
    Individual failures are reported in the result, never raised.

    Raises:
        MissingTokensError: The request carries no tokens
    """
    if not request.tokens:
        raise MissingTokensError()

    started = time.monotonic()
    if limit is None:
        limit = asyncio.Semaphore(concurrency)
    logger.info(f"➡️ Sending {request.type} notification to {len(request.tokens)} tokens")

    async def _send(token: str) -> DeliveryResult:
        notification = build_notification(token, request.type, request.payload, topic)
        async with limit:
            result = await deliver(client, notification)
        if result.delivered:
            logger.info(f"✅ Sent {request.type} APN to {token[:20]}")
        return result

    results = await asyncio.gather(*(_send(token) for token in request.tokens))
    batch = PushBatchResult(
        results=list(results),
        duration=f"{time.monotonic() - started:.2f}",
    )
    logger.info(
        f"✅ {request.type} batch settled in {batch.duration}s: {batch.sent}/{len(batch.results)} sent",
        extra={"sent": batch.sent, "failed": batch.failed}
    )
    return batch
