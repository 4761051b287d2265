from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from typing import Any, List, Optional


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = None
    detail: Optional[Any] = None
    variable: Optional[str] = None
    status: Optional[int] = None
    missing: Optional[List[str]] = None


class MailSentResponse(BaseModel):
    ok: bool = True
    to: str
    maileroo: Any = None


def error_response(status_code: int, **fields) -> Response:
    """Render an ``ErrorResponse`` as JSON, leaving out unset fields."""
    error = ErrorResponse(**fields)
    content = error.model_dump(exclude_none=True, exclude={"detail"})
    # Upstream bodies are passed through untouched, nulls included
    if error.detail is not None:
        content["detail"] = error.detail
    return passthrough_response(status_code, content)


# Statuses that must not carry a response body
NULL_BODY_STATUSES = {204, 205, 304}


def passthrough_response(status_code: int, content) -> Response:
    """Mirror an upstream status, dropping the body where HTTP forbids one."""
    if status_code in NULL_BODY_STATUSES or 100 <= status_code < 200:
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content=content)
