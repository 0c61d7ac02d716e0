from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class PushPayload(BaseModel):
    """Optional alert text supplied by the caller"""
    title: Optional[str] = Field(default=None, description="Alert title")
    body: Optional[str] = Field(default=None, description="Alert body")


class PushRequest(BaseModel):
    """
    Body of POST /send-apn.

    `type` is compared against "silent"; every other value (including typos)
    produces an alert notification.
    """

    tokens: Optional[List[str]] = Field(default=None, description="Device tokens to notify")
    payload: Optional[PushPayload] = Field(default=None, description="Alert title/body overrides")
    type: Optional[Any] = Field(default=None, description="silent | anything else for alert")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tokens": ["a1b2c3", "d4e5f6"],
                "payload": {"title": "Dinner moved", "body": "Now at 8pm"},
                "type": "alert"
            }
        }
    )


class EmailRequest(BaseModel):
    """
    Body of POST /send-email.

    SMTP credentials travel with every request; nothing is stored.
    """

    to: Optional[str] = None
    template: Optional[str] = None
    subject: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = Field(default=None, alias="pass")
    event_title: Optional[str] = Field(default=None, alias="eventTitle")
    event_date: Optional[str] = Field(default=None, alias="eventDate")
    event_time: Optional[str] = Field(default=None, alias="eventTime")
    event_location: Optional[str] = Field(default=None, alias="eventLocation")
    event_id: Optional[str] = Field(default=None, alias="eventId")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "to": "guest@example.com",
                "template": "event_invite.html",
                "subject": "You're invited",
                "user": "events@example.com",
                "pass": "app-password",
                "eventTitle": "Team dinner",
                "eventDate": "2025-06-01",
                "eventTime": "19:00",
                "eventLocation": "Main St 12",
                "eventId": "evt_123"
            }
        }
    )

    @field_validator("event_id", mode="before")
    @classmethod
    def coerce_event_id(cls, v):
        """Event ids may arrive as numbers"""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def missing_required(self) -> List[str]:
        return [name for name in ("to", "template", "subject") if not getattr(self, name)]


class Notification(BaseModel):
    """One push notification addressed to a single device token"""
    device_token: str
    topic: Optional[str] = None
    push_type: str = Field(..., description="background | alert")
    priority: int = Field(..., description="5 for background, 10 for alert")
    aps: Dict[str, Any]

    @property
    def is_silent(self) -> bool:
        return self.push_type == "background"

    def body(self) -> Dict[str, Any]:
        return {"aps": self.aps}
