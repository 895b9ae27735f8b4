import json

import httpx
import pytest
from unittest.mock import AsyncMock

from client.whatsapp.V24 import WhatsAppClient
from core.exceptions import (
    MediaAuthError,
    MediaDownloadError,
    MediaError,
    MediaNotFoundError,
    MediaTimeoutError,
)
from utils.retry import RetryPolicy

BASE_URL = "https://graph.facebook.com/v22.0"


def make_client(handler, sleep=None) -> WhatsAppClient:
    return WhatsAppClient(
        phone_id="PHONE_ID",
        wa_token="TOKEN",
        base_url=BASE_URL,
        verify_token="secret",
        download_policy=RetryPolicy(max_attempts=3, sleep=sleep or AsyncMock()),
        transport=httpx.MockTransport(handler)
    )


async def test_send_text_posts_to_messages_endpoint():
    requests = []

    def handler(request: httpx.Request):
        requests.append(request)
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    result = await make_client(handler).send_text("919876543210", "hello")

    assert result == {"messages": [{"id": "wamid.1"}]}
    [request] = requests
    assert str(request.url) == f"{BASE_URL}/PHONE_ID/messages"
    assert request.headers["Authorization"] == "Bearer TOKEN"
    body = json.loads(request.content)
    assert body["type"] == "text"
    assert body["text"]["body"] == "hello"


async def test_send_template_uses_default_language():
    requests = []

    def handler(request: httpx.Request):
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={})

    await make_client(handler).send_template("919876543210", "optin")

    assert requests[0]["template"] == {"name": "optin", "language": {"code": "en"}}


async def test_send_failure_is_logged_and_returns_none():
    def handler(request: httpx.Request):
        return httpx.Response(400, json={"error": {"message": "bad"}})

    assert await make_client(handler).send_text("919876543210", "hello") is None


async def test_get_media_url_returns_url():
    def handler(request: httpx.Request):
        assert str(request.url) == f"{BASE_URL}/MEDIA_ID"
        return httpx.Response(200, json={"url": "https://lookaside.example/x"})

    assert await make_client(handler).get_media_url("MEDIA_ID") == "https://lookaside.example/x"


@pytest.mark.parametrize("status, body, expected", [
    (404, {"error": {"code": 100}}, MediaNotFoundError),
    (401, {"error": {"code": 190}}, MediaAuthError),
    (400, {"error": {"code": 190}}, MediaAuthError),
    (500, {"error": {"code": 1}}, MediaError),
])
async def test_get_media_url_maps_errors(status, body, expected):
    def handler(request: httpx.Request):
        return httpx.Response(status, json=body)

    with pytest.raises(expected):
        await make_client(handler).get_media_url("MEDIA_ID")


async def test_get_media_url_timeout():
    def handler(request: httpx.Request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(MediaTimeoutError):
        await make_client(handler).get_media_url("MEDIA_ID")


async def test_get_media_url_without_url_in_response():
    def handler(request: httpx.Request):
        return httpx.Response(200, json={"id": "MEDIA_ID"})

    with pytest.raises(MediaError, match="No URL"):
        await make_client(handler).get_media_url("MEDIA_ID")


async def test_download_media_retries_then_succeeds():
    calls = []

    def handler(request: httpx.Request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, content=b"jpeg-bytes")

    sleep = AsyncMock()
    data = await make_client(handler, sleep=sleep).download_media("https://lookaside.example/x")

    assert data == b"jpeg-bytes"
    assert len(calls) == 3
    assert calls[0].headers["Authorization"] == "Bearer TOKEN"
    assert sleep.await_count == 2


async def test_download_media_raises_after_three_failures():
    calls = []

    def handler(request: httpx.Request):
        calls.append(request)
        return httpx.Response(500)

    with pytest.raises(MediaDownloadError):
        await make_client(handler).download_media("https://lookaside.example/x")

    assert len(calls) == 3
