"""
HTTP/2 client for the Apple Push Notification service.

One instance is created at startup and shared by every request; it is
closed when the application shuts down.
"""

import logging
import time
from typing import Optional

import httpx
from jose import jwt

from relay.errors import ApnsError, ApnsConnectionError
from relay.models.schemas import Notification

logger = logging.getLogger(__name__)

SOCKET_ERROR = "SOCKET_ERROR"
TIMEOUT_ERROR = "TIMEOUT"

# APNs rejects provider tokens older than one hour
TOKEN_TTL_SECONDS = 50 * 60


class ApnsClient:
    """
    Token-based (.p8 key) APNs provider connection.

    Args:
        team_id: Apple developer team id, used as the JWT issuer
        key_id: Id of the signing key, sent as the JWT `kid`
        signing_key: PEM encoded EC private key
        default_topic: Bundle id used when a notification has no topic
        host: Gateway host (production or sandbox)
        request_timeout: Seconds before a send is abandoned
    """

    def __init__(
        self,
        team_id: str,
        key_id: str,
        signing_key: str,
        default_topic: Optional[str] = None,
        host: str = "api.push.apple.com",
        request_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.team_id = team_id
        self.key_id = key_id
        self.default_topic = default_topic
        self.host = host
        self._signing_key = signing_key
        self._token: Optional[str] = None
        self._token_issued_at = 0.0
        self._http = httpx.AsyncClient(
            base_url=f"https://{host}",
            http2=True,
            timeout=request_timeout,
            transport=transport,
        )
        logger.info(f"🔗 APNs client initialized for {host}")

    @property
    def has_credentials(self) -> bool:
        return bool(self.team_id and self.key_id and self._signing_key)

    def provider_token(self) -> str:
        """Return the cached provider JWT, signing a fresh one when it is stale"""
        now = time.time()
        if self._token is None or now - self._token_issued_at >= TOKEN_TTL_SECONDS:
            self._token = jwt.encode(
                {"iss": self.team_id, "iat": int(now)},
                self._signing_key,
                algorithm="ES256",
                headers={"kid": self.key_id},
            )
            self._token_issued_at = now
        return self._token

    async def send(self, notification: Notification) -> None:
        """
        Deliver one notification.

        Raises:
            ApnsError: The gateway refused the notification
            ApnsConnectionError: The request never got an answer
        """
        headers = {
            "authorization": f"bearer {self.provider_token()}",
            "apns-push-type": notification.push_type,
            "apns-priority": str(notification.priority),
        }
        topic = notification.topic or self.default_topic
        if topic:
            headers["apns-topic"] = topic

        try:
            response = await self._http.post(
                f"/3/device/{notification.device_token}",
                json=notification.body(),
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise ApnsConnectionError(f"APNs request timed out: {e}", code=TIMEOUT_ERROR) from e
        except httpx.TransportError as e:
            raise ApnsConnectionError(f"APNs socket error: {e}", code=SOCKET_ERROR) from e

        if response.status_code != 200:
            raise ApnsError(response.status_code, _reason(response))

    async def close(self) -> None:
        await self._http.aclose()
        logger.info("APNs client closed")


def _reason(response: httpx.Response) -> Optional[str]:
    try:
        return response.json().get("reason")
    except ValueError:
        return response.text or None
