"""
Request, notification and response schemas
"""

from .schemas import PushPayload, PushRequest, EmailRequest, Notification
from .response import PushResponse, EmailResponse, ErrorResponse

__all__ = [
    "PushPayload",
    "PushRequest",
    "EmailRequest",
    "Notification",
    "PushResponse",
    "EmailResponse",
    "ErrorResponse",
]
