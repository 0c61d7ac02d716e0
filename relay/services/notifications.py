from typing import Any, Optional
from relay.models.schemas import Notification, PushPayload

SILENT_TYPE = "silent"
DEFAULT_TITLE = "Coordiy Update"
DEFAULT_BODY = "Event changed"


def build_notification(
    token: str,
    notification_type: Any,
    payload: Optional[PushPayload] = None,
    topic: Optional[str] = None
) -> Notification:
    """
    Build the notification for one device token.
    Only the exact string "silent" yields a background push.
    """
    if notification_type == SILENT_TYPE:
        return Notification(
            device_token=token,
            topic=topic,
            push_type="background",
            priority=5,
            aps={"content-available": 1},
        )

    title = payload.title if payload and payload.title is not None else DEFAULT_TITLE
    body = payload.body if payload and payload.body is not None else DEFAULT_BODY
    return Notification(
        device_token=token,
        topic=topic,
        push_type="alert",
        priority=10,
        aps={
            "alert": {"title": title, "body": body},
            "sound": "default",
        },
    )
