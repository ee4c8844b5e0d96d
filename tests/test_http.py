"""Tests for the HTTP client against a local aiohttp server."""

import asyncio

import pytest
from aiohttp import test_utils, web
from webdistill.errors import FetchHTTPError, FetchNetworkError, FetchTimeout
from webdistill.http import AsyncHttpClient, decode_content


async def page(request):
    return web.Response(text="<p>Grüße aus Köln</p>", content_type="text/html", charset="utf-8")


async def echo_headers(request):
    return web.json_response(
        {
            "user_agent": request.headers.get("User-Agent"),
            "accept_language": request.headers.get("Accept-Language"),
        }
    )


async def missing(request):
    return web.Response(status=404, text="gone")


async def slow(request):
    await asyncio.sleep(2)
    return web.Response(text="late")


async def large(request):
    return web.Response(body=b"x" * 4096, content_type="text/html")


async def not_json(request):
    return web.Response(text="<html>", content_type="application/json")


async def redirect(request):
    raise web.HTTPFound("/page")


def make_app():
    app = web.Application()
    app.router.add_get("/page", page)
    app.router.add_get("/headers", echo_headers)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/large", large)
    app.router.add_get("/not-json", not_json)
    app.router.add_get("/redirect", redirect)
    return app


class TestDecodeContent:
    """Tests for decode_content."""

    def test_declared_charset(self):
        """Test that the Content-Type charset wins."""
        assert decode_content("café".encode("latin-1"), "text/html; charset=ISO-8859-1") == "café"

    def test_bad_declared_charset_falls_back(self):
        """Test that an unknown charset falls back to detection."""
        text = "Une naïve méprise, déjà vue à l'été dernier. " * 10
        assert decode_content(text.encode("utf-8"), "text/html; charset=bogus") == text

    def test_empty(self):
        """Test that an empty body decodes to an empty string."""
        assert decode_content(b"", "text/html") == ""


class TestAsyncHttpClient:
    """Tests for AsyncHttpClient."""

    @pytest.mark.asyncio
    async def test_get_text(self):
        """Test decoding and the final URL after redirects."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient() as client:
                text, final_url = await client.get_text(str(server.make_url("/redirect")), timeout=5.0)

        assert text == "<p>Grüße aus Köln</p>"
        assert final_url.endswith("/page")

    @pytest.mark.asyncio
    async def test_default_headers(self):
        """Test that User-Agent and Accept-Language are sent."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient(user_agent="TestAgent/1.0", accept_language="de-DE") as client:
                data = await client.get_json(str(server.make_url("/headers")), timeout=5.0)

        assert data == {"user_agent": "TestAgent/1.0", "accept_language": "de-DE"}

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test that non-2xx statuses raise FetchHTTPError."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient() as client:
                with pytest.raises(FetchHTTPError) as exc_info:
                    await client.get(str(server.make_url("/missing")), timeout=5.0)

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Failed to fetch page: 404 Not Found"
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that the per-call budget is enforced."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient() as client:
                with pytest.raises(FetchTimeout):
                    await client.get(str(server.make_url("/slow")), timeout=0.2)

    @pytest.mark.asyncio
    async def test_size_limit(self):
        """Test that oversized bodies are refused."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient(max_content_size=1024) as client:
                with pytest.raises(FetchNetworkError, match="too large|limit exceeded"):
                    await client.get(str(server.make_url("/large")), timeout=5.0)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test that a non-JSON body raises FetchNetworkError."""
        async with test_utils.TestServer(make_app()) as server:
            async with AsyncHttpClient() as client:
                with pytest.raises(FetchNetworkError, match="Invalid JSON"):
                    await client.get_json(str(server.make_url("/not-json")), timeout=5.0)

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        """Test that transport failures raise FetchNetworkError."""
        server = test_utils.TestServer(make_app())
        await server.start_server()
        url = str(server.make_url("/page"))
        await server.close()

        async with AsyncHttpClient() as client:
            with pytest.raises(FetchNetworkError):
                await client.get(url, timeout=5.0)

    @pytest.mark.asyncio
    async def test_requires_context(self):
        """Test that the session must be opened first."""
        with pytest.raises(RuntimeError):
            await AsyncHttpClient().get("https://example.com")
