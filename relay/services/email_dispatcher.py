"""
Templated transactional email sent with caller-supplied SMTP credentials.

Each request builds its own SMTP session; nothing is pooled or retried.
Calendar invites are attached by reference (message/external-body) so the
.ics file is never downloaded by the relay.
"""

import asyncio
import logging
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from relay.errors import InvalidTemplateError, MissingParamsError, RelayError
from relay.models.schemas import EmailRequest

logger = logging.getLogger(__name__)

CALENDAR_CONTENT_TYPE = "text/calendar; charset=UTF-8; method=REQUEST"

Sender = Callable[..., Awaitable[Any]]


def calendar_invite_url(base_url: str, event_id: str) -> str:
    return f"{base_url.rstrip('/')}/{event_id}.ics"


def calendar_reference(url: str, filename: str) -> MIMEBase:
    """Attachment part pointing at a remote .ics file"""
    part = MIMEBase("message", "external-body", **{"access-type": "URL", "URL": url})
    inner = Message()
    inner["Content-Type"] = CALENDAR_CONTENT_TYPE
    inner.add_header("Content-Disposition", "attachment", filename=filename)
    inner.set_payload("")
    part.attach(inner)
    return part


class EmailDispatcher:
    """
    Renders a named template and sends it over SMTP.

    Args:
        template_dir: Directory holding the email templates
        app_name: Value of the `appName` template variable
        calendar_base_url: Prefix of calendar invite links
        smtp_host / smtp_port / start_tls / timeout: SMTP session settings
        sender: Coroutine used to submit the message (aiosmtplib.send)
    """

    def __init__(
        self,
        template_dir: str,
        app_name: str,
        calendar_base_url: str,
        smtp_host: str = "smtp.gmail.com",
        smtp_port: int = 587,
        start_tls: bool = True,
        timeout: float = 30.0,
        sender: Optional[Sender] = None
    ):
        self.template_dir = Path(template_dir)
        self.app_name = app_name
        self.calendar_base_url = calendar_base_url
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.start_tls = start_tls
        self.timeout = timeout
        self._sender = sender or aiosmtplib.send
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "htm", "xml", "hbs", "handlebars"]),
        )

    def _check_template_name(self, name: str) -> None:
        root = self.template_dir.resolve()
        candidate = (root / name).resolve()
        if Path(name).is_absolute() or candidate == root or not candidate.is_relative_to(root):
            raise InvalidTemplateError(f"Invalid template: {name}")

    def render(self, name: str, context: Dict[str, Any]) -> str:
        """
        Render a template from the template directory.

        Raises:
            InvalidTemplateError: The name points outside the template directory
            RelayError: The template does not exist
        """
        self._check_template_name(name)
        try:
            template = self._env.get_template(Path(name).as_posix())
        except TemplateNotFound as e:
            raise RelayError(f"Template not found: {name}") from e
        return template.render(**context)

    def template_context(self, request: EmailRequest) -> Dict[str, Any]:
        return {
            "username": request.to,
            "eventTitle": request.event_title,
            "eventDate": request.event_date,
            "eventTime": request.event_time,
            "eventLocation": request.event_location,
            "appName": self.app_name,
            "supportEmail": request.user,
            "icalLink": calendar_invite_url(self.calendar_base_url, request.event_id)
            if request.event_id else "",
        }

    def build_message(self, request: EmailRequest, html: str) -> MIMEMultipart:
        message = MIMEMultipart("mixed")
        if request.user:
            message["From"] = request.user
        message["To"] = request.to
        message["Subject"] = request.subject
        message["Message-ID"] = make_msgid()
        message.attach(MIMEText(html, "html", "utf-8"))

        if request.event_id:
            url = calendar_invite_url(self.calendar_base_url, request.event_id)
            message.attach(calendar_reference(url, f"{request.event_title or 'event'}.ics"))
        return message

    async def send(self, request: EmailRequest) -> str:
        """
        Render, build and send one email. Returns the Message-ID.

        Raises:
            MissingParamsError: to, template or subject is missing
        """
        if request.missing_required():
            raise MissingParamsError()

        # Template loads hit the disk; keep them off the event loop
        html = await asyncio.to_thread(self.render, request.template, self.template_context(request))
        message = self.build_message(request, html)

        await self._sender(
            message,
            hostname=self.smtp_host,
            port=self.smtp_port,
            username=request.user,
            password=request.password,
            start_tls=self.start_tls,
            timeout=self.timeout,
        )
        message_id = message["Message-ID"]
        logger.info(f"📧 Email sent: {message_id}")
        return message_id
