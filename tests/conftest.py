import pytest
from fastapi.testclient import TestClient
from webrelay.main import app
from webrelay.config import Settings, get_settings


@pytest.fixture(scope="function")
def configure(tmp_path):
    """Override the app settings for one test. Returns the Settings in use."""
    def _configure(**overrides):
        values = {
            "pic_api_url": "https://images.test/api/1/upload",
            "pic_api_key": "pic-test-key",
            "pic_album_id": "",
            "maileroo_api_url": "https://mail.test/api/v2/emails",
            "maileroo_api_key": "maileroo-test-key",
            "mail_from_address": "no-reply@test.maileroo.org",
            "mail_from_name": "My-Web",
            "mail_footer": True,
            "save_local_copy": False,
            "local_upload_dir": str(tmp_path / "uploads"),
        }
        values.update(overrides)
        test_settings = Settings(_env_file=None, **values)
        app.dependency_overrides[get_settings] = lambda: test_settings
        return test_settings

    yield _configure
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(configure):
    configure()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_image():
    return ("cat photo.png", b"\x89PNG\r\n\x1a\nfake-image-bytes", "image/png")


@pytest.fixture
def sample_mail_form():
    return {
        "to": "jane@example.com",
        "subject": "Hello",
        "message": "Line one\nLine two"
    }


@pytest.fixture
def sample_upload_response():
    return {
        "status_code": 200,
        "success": {"message": "image uploaded", "code": 200},
        "image": {
            "name": "cat-photo",
            "url": "https://img.test/images/2026/10/19/cat-photo.png"
        },
        "status_txt": "OK"
    }
