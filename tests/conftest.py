import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from main import create_app

TEST_TOKEN = "test-token"
TEST_BOUNDARY = "egamitestboundary"


@pytest.fixture(name="data_dir")
def data_dir_fixture(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture(name="test_settings")
def test_settings_fixture(data_dir) -> Settings:
    return Settings(USER_TOKEN=TEST_TOKEN, DATA_DIRECTORY=data_dir)


@pytest.fixture(name="client")
def client_fixture(test_settings: Settings):
    app = create_app(test_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture(name="multipart_body")
def multipart_body_fixture():
    """
    Build a raw multipart/form-data body.

    Parts are (field name, filename or None, content) tuples. Returns the
    body and its Content-Type header value.
    """

    def build(parts, boundary: str = TEST_BOUNDARY):
        body = b""
        for name, filename, content in parts:
            disposition = f'form-data; name="{name}"'
            if filename is not None:
                disposition += f'; filename="{filename}"'
            body += (
                f"--{boundary}\r\nContent-Disposition: {disposition}\r\n\r\n".encode()
                + content
                + b"\r\n"
            )
        body += f"--{boundary}--\r\n".encode()
        return body, f"multipart/form-data; boundary={boundary}"

    return build
