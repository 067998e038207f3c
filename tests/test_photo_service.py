import asyncio

import httpx
import pytest

from core.config import settings
from services import photo_service


@pytest.fixture
def mock_pexels(monkeypatch):
    real_client = httpx.AsyncClient

    def install(handler):
        monkeypatch.setattr(
            photo_service.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    monkeypatch.setattr(settings, "PEXELS_API_KEY", "pexels-key")
    return install


def test_returns_large_photo_url(mock_pexels):
    seen = {}

    def handler(request):
        seen["query"] = request.url.params["query"]
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"photos": [{"src": {"large": "https://img/large.jpg"}}]})

    mock_pexels(handler)
    assert asyncio.run(photo_service.fetch_destination_image("Oslo")) == "https://img/large.jpg"
    assert seen == {"query": "Oslo travel", "auth": "pexels-key"}


def test_no_photos_returns_none(mock_pexels):
    mock_pexels(lambda request: httpx.Response(200, json={"photos": []}))
    assert asyncio.run(photo_service.fetch_destination_image("Nowhere")) is None


def test_http_error_returns_none(mock_pexels):
    mock_pexels(lambda request: httpx.Response(500))
    assert asyncio.run(photo_service.fetch_destination_image("Oslo")) is None


def test_connection_error_returns_none(mock_pexels):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    mock_pexels(handler)
    assert asyncio.run(photo_service.fetch_destination_image("Oslo")) is None


def test_missing_key_skips_lookup(monkeypatch):
    monkeypatch.setattr(settings, "PEXELS_API_KEY", "")
    assert asyncio.run(photo_service.fetch_destination_image("Oslo")) is None

