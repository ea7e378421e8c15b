"""Tests for the outbound HTTP service."""

import httpx
import pytest

from linkvault.errors import NonRetryableError
from linkvault.services.http import categorize_http_error


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


@pytest.mark.parametrize("status_code", [400, 403, 404, 410, 429])
def test_client_errors_are_non_retryable(status_code: int):
    assert isinstance(categorize_http_error(_status_error(status_code)), NonRetryableError)


def test_server_errors_are_kept():
    error = _status_error(503)
    assert categorize_http_error(error) is error


@pytest.mark.asyncio
async def test_fetch_sends_params_and_default_headers(make_http):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    http = make_http(handler)
    payload = await http.fetch_json("https://api.example.com/data", params={"url": "a b"})

    assert payload == {"ok": True}
    assert seen[0].url.params["url"] == "a b"
    assert "Mozilla/5.0" in seen[0].headers["user-agent"]


@pytest.mark.asyncio
async def test_fetch_raises_non_retryable_on_404(make_http):
    http = make_http(lambda request: httpx.Response(404, text="gone"))
    with pytest.raises(NonRetryableError):
        await http.fetch_text("https://example.com/missing")


@pytest.mark.asyncio
async def test_fetch_raises_status_error_on_500(make_http):
    http = make_http(lambda request: httpx.Response(500))
    with pytest.raises(httpx.HTTPStatusError):
        await http.fetch("https://example.com/broken")


@pytest.mark.asyncio
async def test_fetch_json_rejects_non_json(make_http):
    http = make_http(lambda request: httpx.Response(200, text="<html>login</html>"))
    with pytest.raises(ValueError):
        await http.fetch_json("https://example.com/api")


@pytest.mark.asyncio
async def test_fetch_is_attempted_once(make_http):
    calls = []

    def handler(request):
        calls.append(request.url)
        raise httpx.ConnectError("refused", request=request)

    http = make_http(handler)
    with pytest.raises(httpx.ConnectError):
        await http.fetch("https://example.com")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_resolve_redirects_returns_final_url(make_http):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "vm.tiktok.com":
            return httpx.Response(
                302, headers={"Location": "https://www.tiktok.com/@jane/video/7000?_r=1"}
            )
        return httpx.Response(200, text="ok")

    http = make_http(handler)
    final = await http.resolve_redirects("https://vm.tiktok.com/ZM8abc/")
    assert final == "https://www.tiktok.com/@jane/video/7000?_r=1"
