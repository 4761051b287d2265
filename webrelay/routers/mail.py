from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse
from webrelay.config import Settings, get_settings
from webrelay.schemas.mail import MailRequest
from webrelay.schemas.response import MailSentResponse, error_response
from webrelay.services.form_fields import FormParseError, get_text, read_form
from webrelay.services.mail_service import MailService
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["mail"])

SMTP_UNSUPPORTED_HTML = """
<h2>Gmail SMTP is not supported here</h2>
<p>This route used to send mail over SMTP, which needs a direct TCP connection
that this environment does not allow.</p>
<p>Please use <code>/api/send-mail-maileroo</code> instead.</p>
<a href="/">Back to home</a>
"""


@router.post("/send-mail", response_class=HTMLResponse)
async def send_mail_legacy():
    """Legacy SMTP route, kept so old forms get an explanation instead of a 404."""
    return HTMLResponse(content=SMTP_UNSUPPORTED_HTML, status_code=501)


def _missing_env(settings: Settings):
    for variable, value in (
        ("MAILEROO_API_KEY", settings.maileroo_api_key),
        ("MAIL_FROM_ADDRESS", settings.mail_from_address),
    ):
        if not value:
            return variable
    return None


@router.post("/send-mail-maileroo")
async def send_mail_maileroo(request: Request, settings: Settings = Depends(get_settings)):
    """
    Send an email through Maileroo.

    Form fields:
        to: Recipient address
        subject: Subject line
        message: Message body, plain text

    Returns:
        Success envelope with the recipient and Maileroo's response, or an
        error envelope (missing_env, invalid_input, maileroo_error, request_failed)
    """
    variable = _missing_env(settings)
    if variable:
        logger.error("Mail proxy is not configured", variable=variable)
        return error_response(
            500,
            error="missing_env",
            variable=variable,
            detail=f"{variable} is not set"
        )

    try:
        form = await read_form(request)
    except FormParseError as e:
        return error_response(400, error="invalid_input", detail=str(e))

    mail = MailRequest(
        to=get_text(form, "to"),
        subject=get_text(form, "subject"),
        message=get_text(form, "message"),
    )

    missing = mail.missing_fields()
    if missing:
        return error_response(
            400,
            error="invalid_input",
            detail="to, subject and message are required",
            missing=missing
        )

    try:
        service = MailService(settings)
        status_code, body = await service.send(mail)
    except Exception as e:
        logger.error("Maileroo API request failed", error=str(e), to=mail.to)
        return error_response(500, error="request_failed", detail=str(e))

    if 200 <= status_code < 300:
        logger.info("Mail sent", to=mail.to, status_code=status_code)
        return JSONResponse(
            status_code=200,
            content=MailSentResponse(to=mail.to, maileroo=body).model_dump()
        )

    logger.error("Maileroo API error", status_code=status_code, body=body)
    return error_response(
        status_code,
        error="maileroo_error",
        status=status_code,
        detail=body
    )
