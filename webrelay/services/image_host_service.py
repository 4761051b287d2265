import json
import math
from typing import Any, Dict, Optional, Tuple

import httpx
import structlog

from webrelay.config import Settings
from webrelay.services.form_fields import BinaryPayload

logger = structlog.get_logger()


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"{literal} does not fit in a finite float")
    return value


def loads_strict(text: str) -> Any:
    """
    ``json.loads`` that rejects NaN, Infinity and overflowing numbers, none of
    which can be rendered back out as JSON.
    """
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def parse_upstream_body(text: str) -> Any:
    """Parse an upstream body as JSON, wrapping anything else as ``{"raw": text}``."""
    try:
        return loads_strict(text)
    except ValueError:
        return {"raw": text}


class ImageHostService:
    """Relays uploaded files to the image host's upload endpoint."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.pic_api_url
        self.api_key = settings.pic_api_key
        self.album_id = settings.pic_album_id
        self.timeout = settings.upstream_timeout
        self.transport = transport

    def build_form(self, payload: BinaryPayload) -> Tuple[Dict[str, str], Dict[str, tuple]]:
        """
        Build the outbound multipart body.

        Args:
            payload: The file received from the browser

        Returns:
            Tuple of (data fields, files) ready for httpx
        """
        data = {"format": "json"}
        if self.api_key:
            data["key"] = self.api_key
        if self.album_id:
            data["album_id"] = self.album_id

        files = {
            "source": (payload.filename, payload.data, payload.content_type)
        }
        return data, files

    async def upload(self, payload: BinaryPayload) -> Tuple[int, Any]:
        """
        Forward a file to the image host.

        Args:
            payload: The file received from the browser

        Returns:
            Tuple of (upstream status code, parsed upstream body)

        Raises:
            httpx.HTTPError: If the upstream could not be reached
        """
        data, files = self.build_form(payload)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.api_url, data=data, files=files)

        body = parse_upstream_body(response.text)

        logger.info(
            "Image host responded",
            filename=payload.filename,
            size=payload.size,
            status_code=response.status_code
        )

        return response.status_code, body
