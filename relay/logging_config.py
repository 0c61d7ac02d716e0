"""
Structured JSON logging configuration with correlation IDs.
Every record carries the request_id of the inbound call and the channel
(push or email) it was handled on.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "notification-relay-service"

# Context variables for correlation IDs
_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
_channel: ContextVar[Optional[str]] = ContextVar('channel', default=None)

_configured = False


def set_context(
    request_id: Optional[str] = None,
    channel: Optional[str] = None
) -> None:
    """Set correlation context variables"""
    if request_id:
        _request_id.set(request_id)
    if channel:
        _channel.set(channel)


def clear_context() -> None:
    """Clear all context variables"""
    _request_id.set(None)
    _channel.set(None)


def get_context() -> Dict[str, Optional[str]]:
    """Get current correlation context"""
    return {
        "request_id": _request_id.get(),
        "channel": _channel.get()
    }


class CorrelationIdFilter(logging.Filter):
    """Add correlation IDs to log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        record.channel = _channel.get() or "-"
        return True


class JsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with correlation IDs and timestamps"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        """Add custom fields to JSON log"""
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')

        log_record['request_id'] = getattr(record, 'request_id', '-')
        log_record['channel'] = getattr(record, 'channel', '-')

        log_record['service'] = SERVICE_NAME
        log_record['level'] = record.levelname

        log_record.pop('asctime', None)


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structured JSON logging (safe to call more than once)"""
    global _configured

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    logging.getLogger('relay').setLevel(log_level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter('%(message)s %(levelname)s %(name)s'))
    handler.addFilter(CorrelationIdFilter())
    root_logger.addHandler(handler)

    # Suppress verbose libraries
    for name in ('httpx', 'httpcore', 'hpack', 'aiosmtplib'):
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get logger instance with context support"""
    return logging.getLogger(name)
