import html
from typing import Any, Optional, Tuple

import httpx
import structlog

from webrelay.config import Settings
from webrelay.services.image_host_service import loads_strict
from webrelay.schemas.mail import MailAddress, MailerooPayload, MailRequest

logger = structlog.get_logger()

HTML_FOOTER = (
    '<hr style="border:none;border-top:1px solid #ddd;margin:24px 0 12px">'
    '<p style="color:#888;font-size:12px">'
    "This message was sent from a web form. Please do not reply to this address."
    "</p>"
)

PLAIN_FOOTER = (
    "\n\n--\n"
    "This message was sent from a web form. Please do not reply to this address."
)


def message_to_html(message: str) -> str:
    """Escape the message and turn its line breaks into <br>."""
    normalized = message.replace("\r\n", "\n")
    return "<p>" + html.escape(normalized).replace("\n", "<br>") + "</p>"


def parse_mail_body(text: str) -> Any:
    """Best-effort JSON parse; non-JSON bodies are returned as the raw string."""
    try:
        return loads_strict(text)
    except ValueError:
        return text


class MailService:
    """Sends transactional email through the Maileroo HTTP API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.maileroo_api_url
        self.api_key = settings.maileroo_api_key
        self.from_address = settings.mail_from_address
        self.from_name = settings.mail_from_name
        self.with_footer = settings.mail_footer
        self.timeout = settings.upstream_timeout
        self.transport = transport

    def build_payload(self, request: MailRequest) -> MailerooPayload:
        html_body = message_to_html(request.message)
        plain_body = request.message
        if self.with_footer:
            html_body += HTML_FOOTER
            plain_body += PLAIN_FOOTER

        return MailerooPayload(
            from_=MailAddress(address=self.from_address, display_name=self.from_name),
            to=[MailAddress(address=request.to)],
            subject=request.subject,
            html=html_body,
            plain=plain_body,
            tracking=True,
        )

    async def send(self, request: MailRequest) -> Tuple[int, Any]:
        """
        Send one email.

        Returns:
            Tuple of (upstream status code, parsed upstream body)

        Raises:
            httpx.HTTPError: If the upstream could not be reached
        """
        payload = self.build_payload(request)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.api_url,
                json=payload.model_dump(by_alias=True, exclude_none=True),
                headers=headers,
            )

        logger.info("Maileroo responded", to=request.to, status_code=response.status_code)

        return response.status_code, parse_mail_body(response.text)
