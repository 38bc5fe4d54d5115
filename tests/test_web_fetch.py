"""
Tests for web fetch with size limits.

Tests verify:
- Content-Length header checking before download
- Streaming read with size enforcement
- Error statuses, timeouts and invalid URLs
"""

import httpx
import pytest

from backends.web_fetch import MAX_RESPONSE_SIZE, fetch_url


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestWebFetch:
    """Test suite for fetch_url."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self):
        """Bodies under the limit are returned as text."""
        transport = _transport(lambda request: httpx.Response(200, text="<html>hi</html>"))
        assert await fetch_url("https://example.com", transport=transport) == "<html>hi</html>"

    @pytest.mark.asyncio
    async def test_charset_from_content_type(self):
        """The declared charset is used for decoding."""
        body = "café".encode("latin-1")
        transport = _transport(
            lambda request: httpx.Response(200, content=body, headers={"content-type": "text/plain; charset=latin-1"})
        )
        assert await fetch_url("https://example.com", transport=transport) == "café"

    @pytest.mark.asyncio
    async def test_content_length_header_rejection(self):
        """Oversized bodies are rejected from the header before download."""
        transport = _transport(
            lambda request: httpx.Response(200, content=b"x", headers={"content-length": str(10 * 1024 * 1024)})
        )
        with pytest.raises(ValueError, match="response too large \\(exceeds 5MB limit\\)"):
            await fetch_url("https://example.com/large-file.zip", transport=transport)

    @pytest.mark.asyncio
    async def test_streaming_read_size_enforcement(self):
        """Bodies without a length header are cut off while streaming."""

        async def chunks():
            for _ in range(6):
                yield b"x" * (1024 * 1024)

        transport = _transport(lambda request: httpx.Response(200, content=chunks()))
        with pytest.raises(ValueError, match="response too large"):
            await fetch_url("https://example.com/stream", transport=transport)

    @pytest.mark.asyncio
    async def test_exactly_at_limit(self):
        """A body of exactly the limit is accepted."""
        transport = _transport(lambda request: httpx.Response(200, content=b"a" * MAX_RESPONSE_SIZE))
        assert len(await fetch_url("https://example.com", transport=transport)) == MAX_RESPONSE_SIZE

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        transport = _transport(lambda request: httpx.Response(404))
        with pytest.raises(ValueError, match="HTTP error 404"):
            await fetch_url("https://example.com/missing", transport=transport)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(ValueError, match="timed out"):
            await fetch_url("https://example.com", timeout=1, transport=_transport(handler))

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ValueError, match="Request failed"):
            await fetch_url("https://example.com", transport=_transport(handler))

    @pytest.mark.asyncio
    async def test_invalid_urls(self):
        """Only http(s) URLs are fetched."""
        with pytest.raises(ValueError, match="must start with"):
            await fetch_url("ftp://example.com")
        with pytest.raises(ValueError, match="non-empty"):
            await fetch_url("")
