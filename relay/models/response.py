"""
Response bodies returned by the relay endpoints.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class PushResponse(BaseModel):
    """
    Returned once every delivery in the batch has settled.

    `success` only means the batch was accepted; `failed` counts the tokens
    whose delivery ended in a terminal error.

    Example:
        {"success": true, "duration": "0.42", "sent": 2, "failed": 0}
    """
    success: bool = True
    duration: Optional[str] = None
    sent: int = 0
    failed: int = 0

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"success": True, "duration": "0.42", "sent": 2, "failed": 0}
        }
    )


class EmailResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str


def error_body(error: str) -> dict:
    """Serialized error payload for JSONResponse"""
    return ErrorResponse(error=error).model_dump()
