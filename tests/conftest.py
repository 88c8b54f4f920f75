"""
Shared test configuration and fixtures for the Reformat tests.
"""

import pytest
import httpx
from fastapi.testclient import TestClient
from typing import Callable, List, Optional

from app import create_app
from reformat.config import Settings
from reformat.models import UploadedFile


CONVERSION_URL = "http://converter.test/api/convert"

MB = 1024 * 1024


class FakeConverter:
    """Stands in for the remote conversion endpoint and records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.content = b"converted-bytes"
        self.headers = {}
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def converter() -> FakeConverter:
    """Mocked conversion endpoint, returning 200 with bytes by default."""
    return FakeConverter()


@pytest.fixture
def make_upload() -> Callable[..., UploadedFile]:
    """Factory for UploadedFile instances."""
    def factory(name: str = "report.pdf", declared_type: str = "", byte_size: Optional[int] = None,
                content: bytes = b"%PDF-1.4 sample") -> UploadedFile:
        return UploadedFile(name=name, declared_type=declared_type, byte_size=byte_size, content=content)
    return factory


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a small size ceiling so oversize uploads stay cheap."""
    return Settings(conversion_url=CONVERSION_URL, max_file_size=1 * MB)


@pytest.fixture
def client(test_settings, converter):
    """FastAPI test client wired to the fake converter."""
    app = create_app(settings=test_settings, transport=converter.transport)
    with TestClient(app) as test_client:
        yield test_client
