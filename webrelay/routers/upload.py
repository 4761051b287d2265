from fastapi import APIRouter, Depends, Request
from webrelay.config import Settings, get_settings
from webrelay.schemas.response import error_response, passthrough_response
from webrelay.services.form_fields import BinaryPayload, FormParseError, get_form_value, read_form
from webrelay.services.image_host_service import ImageHostService
from webrelay.services.local_storage import build_local_path, save_local_copy
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload")
async def upload_image(request: Request, settings: Settings = Depends(get_settings)):
    """
    Relay a browser upload to the image host.

    Expects a multipart form with a ``file`` part. The upstream JSON body is
    returned as-is with the upstream status code, plus a ``local_path`` hint
    when local copies are enabled.
    """
    try:
        form = await read_form(request)
    except FormParseError as e:
        logger.warning("Upload rejected: malformed form body", error=str(e))
        return error_response(400, error="no_file", kind="invalid_input", detail=str(e))

    payload = await get_form_value(form, "file")

    if not isinstance(payload, BinaryPayload):
        logger.warning("Upload rejected: no file part", field_type=type(payload).__name__)
        return error_response(400, error="no_file", kind="invalid_input")

    local_path = None
    if settings.save_local_copy:
        path = build_local_path(settings.local_upload_dir, payload.filename)
        local_path = path.as_posix()
        # Outcome only matters for the log line written by save_local_copy
        await save_local_copy(path, payload.data)

    try:
        service = ImageHostService(settings)
        status_code, body = await service.upload(payload)
    except Exception as e:
        logger.error(
            "Upload proxy error",
            error=str(e),
            filename=payload.filename
        )
        return error_response(500, error="proxy_error", detail=str(e))

    if local_path is not None and isinstance(body, dict):
        body = {**body, "local_path": local_path}

    return passthrough_response(status_code, body)
