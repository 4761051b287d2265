import asyncio
from datetime import datetime
from io import BytesIO

import pytest
from starlette.datastructures import FormData, Headers, UploadFile
from webrelay.config import Settings
from webrelay.schemas.mail import MailRequest
from webrelay.services.form_fields import (
    BinaryPayload,
    TextField,
    classify_form_value,
    get_form_value,
    get_text,
)
from webrelay.services.image_host_service import loads_strict, parse_upstream_body
from webrelay.services.local_storage import build_local_path, sanitize_filename, save_local_copy
from webrelay.services.mail_service import (
    HTML_FOOTER,
    PLAIN_FOOTER,
    MailService,
    message_to_html,
    parse_mail_body,
)


def _settings(**overrides):
    values = {
        "maileroo_api_key": "key",
        "mail_from_address": "no-reply@test.maileroo.org",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize("filename,expected", [
    ("photo.png", "photo.png"),
    ("my photo (1).jpg", "my_photo__1_.jpg"),
    ("../../etc/passwd", ".._.._etc_passwd"),
    ("รูปภาพ.png", "______.png"),
    ("a-b_c.d", "a-b_c.d"),
    ("", "upload.bin"),
    ("..", "upload.bin"),
])
def test_sanitize_filename(filename, expected):
    assert sanitize_filename(filename) == expected


def test_build_local_path():
    path = build_local_path("uploads", "cat photo.png", now=datetime(2026, 10, 19, 8, 30, 0, 123456))

    assert path.as_posix() == "uploads/20261019083000123456_cat_photo.png"


def test_save_local_copy_writes_file(tmp_path):
    path = tmp_path / "nested" / "file.bin"

    result = asyncio.run(save_local_copy(path, b"data"))

    assert result.ok is True
    assert result.error is None
    assert result.path == path.as_posix()
    assert path.read_bytes() == b"data"


def test_save_local_copy_reports_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    path = blocker / "file.bin"

    result = asyncio.run(save_local_copy(path, b"data"))

    assert result.ok is False
    assert result.path == path.as_posix()
    assert result.error


def test_classify_upload_file():
    upload = UploadFile(
        file=BytesIO(b"bytes"),
        filename="a.png",
        headers=Headers({"content-type": "image/png"}),
    )

    value = asyncio.run(classify_form_value("file", upload))

    assert value == BinaryPayload(field="file", filename="a.png", content_type="image/png", data=b"bytes")
    assert value.size == 5


def test_classify_upload_file_defaults():
    upload = UploadFile(file=BytesIO(b""), filename="")

    value = asyncio.run(classify_form_value("file", upload))

    assert isinstance(value, BinaryPayload)
    assert value.filename == "upload.bin"
    assert value.content_type == "application/octet-stream"


def test_classify_text_field():
    value = asyncio.run(classify_form_value("file", "hello"))

    assert value == TextField(field="file", value="hello")


def test_get_form_value_missing():
    form = FormData([("other", "x")])

    assert asyncio.run(get_form_value(form, "file")) is None


def test_get_text():
    upload = UploadFile(file=BytesIO(b"x"), filename="a.txt")
    form = FormData([("to", "  a@b.c "), ("message", upload)])

    assert get_text(form, "to") == "a@b.c"
    assert get_text(form, "message") == ""
    assert get_text(form, "subject") == ""


def test_parse_upstream_body():
    assert parse_upstream_body('{"status_code": 200}') == {"status_code": 200}
    assert parse_upstream_body("OK") == {"raw": "OK"}
    assert parse_upstream_body("") == {"raw": ""}


def test_parse_mail_body():
    assert parse_mail_body('{"id": "abc"}') == {"id": "abc"}
    assert parse_mail_body("Bad Gateway") == "Bad Gateway"


@pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", '{"n": NaN}', "[1e999]"])
def test_parse_rejects_non_standard_json(text):
    assert parse_upstream_body(text) == {"raw": text}
    assert parse_mail_body(text) == text


def test_loads_strict_keeps_ordinary_numbers():
    assert loads_strict('{"a": 1.5, "b": -2e3, "c": 10}') == {"a": 1.5, "b": -2000.0, "c": 10}


def test_message_to_html():
    assert message_to_html("a\nb\r\nc") == "<p>a<br>b<br>c</p>"
    assert message_to_html("<script>x</script> & co") == "<p>&lt;script&gt;x&lt;/script&gt; &amp; co</p>"


def test_build_payload_with_footer():
    service = MailService(_settings())

    payload = service.build_payload(MailRequest(to="jane@example.com", subject="Hi", message="one\ntwo"))
    data = payload.model_dump(by_alias=True, exclude_none=True)

    assert data["from"] == {"address": "no-reply@test.maileroo.org", "display_name": "My-Web"}
    assert data["to"] == [{"address": "jane@example.com"}]
    assert data["html"] == "<p>one<br>two</p>" + HTML_FOOTER
    assert data["plain"] == "one\ntwo" + PLAIN_FOOTER
    assert data["tracking"] is True


def test_build_payload_without_footer():
    service = MailService(_settings(mail_footer=False))

    payload = service.build_payload(MailRequest(to="jane@example.com", subject="Hi", message="one\ntwo"))

    assert payload.html == "<p>one<br>two</p>"
    assert payload.plain == "one\ntwo"


def test_mail_request_missing_fields():
    assert MailRequest(to="a@b.c", subject="s", message="m").missing_fields() == []
    assert MailRequest(to="", subject="s", message="").missing_fields() == ["to", "message"]


def test_settings_are_immutable():
    settings = _settings()

    with pytest.raises(Exception):
        settings.maileroo_api_key = "changed"
