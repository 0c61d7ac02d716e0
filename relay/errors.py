"""
Exceptions raised while relaying push notifications and emails.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for relay failures"""


class MissingTokensError(RelayError):
    """Push request arrived without any device token"""

    def __init__(self, message: str = "Missing tokens"):
        super().__init__(message)


class MissingParamsError(RelayError):
    """Email request lacks one of to / template / subject"""

    def __init__(self, message: str = "Missing params"):
        super().__init__(message)


class InvalidTemplateError(RelayError):
    """Template name resolves outside the template directory"""


class ApnsError(RelayError):
    """Push gateway answered with a non-200 status"""

    def __init__(self, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason or "Unknown"
        super().__init__(f"APNs rejected notification ({status_code}): {self.reason}")


class ApnsConnectionError(RelayError):
    """Transport failure talking to the push gateway"""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)
