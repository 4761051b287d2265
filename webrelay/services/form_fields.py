"""
Classification of incoming multipart/urlencoded form values.

Starlette hands back either an ``UploadFile`` or a plain ``str`` for each
form field. Handlers should not poke at those objects directly, so each value
is turned into one of two variants:

- ``BinaryPayload``: a file part with its bytes already read
- ``TextField``: an ordinary text value

Handlers then dispatch on the variant type only.
"""

from dataclasses import dataclass
from typing import Optional, Union

from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

DEFAULT_FILENAME = "upload.bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class BinaryPayload:
    field: str
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TextField:
    field: str
    value: str


FormValue = Union[BinaryPayload, TextField]


async def classify_form_value(field: str, value: Union[UploadFile, str]) -> FormValue:
    """Turn a raw form value into a ``BinaryPayload`` or ``TextField``."""
    if isinstance(value, UploadFile):
        data = await value.read()
        return BinaryPayload(
            field=field,
            filename=value.filename or DEFAULT_FILENAME,
            content_type=value.content_type or DEFAULT_CONTENT_TYPE,
            data=data,
        )
    return TextField(field=field, value=str(value))


async def get_form_value(form: FormData, field: str) -> Optional[FormValue]:
    """Return the classified value of ``field``, or None if it is absent."""
    value = form.get(field)
    if value is None:
        return None
    return await classify_form_value(field, value)


def get_text(form: FormData, field: str) -> str:
    """
    Read a text field, trimmed. Missing fields and file parts both read as "".
    """
    value = form.get(field)
    if value is None or isinstance(value, UploadFile):
        return ""
    return str(value).strip()


class FormParseError(Exception):
    """The request body could not be parsed as form data."""


async def read_form(request: Request) -> FormData:
    """
    Parse the request body as form data.

    Raises:
        FormParseError: If the body is malformed multipart/urlencoded data
    """
    try:
        return await request.form()
    except MultiPartException as e:
        raise FormParseError(e.message) from e
    except HTTPException as e:
        # Starlette wraps MultiPartException in a 400 HTTPException inside an app
        raise FormParseError(str(e.detail)) from e
