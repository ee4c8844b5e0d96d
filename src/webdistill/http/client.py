"""Async HTTP client for fetching untrusted remote pages."""

from __future__ import annotations

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import aiohttp
from charset_normalizer import from_bytes as detect_encoding

from ..errors import FetchHTTPError, FetchNetworkError, FetchTimeout
from ..models.config import DEFAULT_USER_AGENT
from .protocols import HttpResponse

logger = logging.getLogger(__name__)


def decode_content(content: bytes, content_type: str) -> str:
    """
    Decode content with intelligent encoding detection.

    Fallback chain:
    1. Content-Type header charset
    2. charset-normalizer detection
    3. UTF-8 with replacement
    """
    encoding = None
    if content_type:
        for part in content_type.split(";"):
            part = part.strip()
            if part.lower().startswith("charset="):
                encoding = part.split("=", 1)[1].strip().strip("\"'")
                break

    if encoding:
        try:
            return content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Failed to decode with declared encoding: {encoding}")

    if not content:
        return ""

    best_match = detect_encoding(content).best()
    if best_match is not None:
        logger.debug(f"Detected encoding: {best_match.encoding}")
        return str(best_match)

    return content.decode("utf-8", errors="replace")


class AsyncHttpClient:
    """
    Async HTTP client with per-call timeouts and typed failures.

    Features:
    - Browser-like User-Agent and Accept-Language on every request
    - Content size limits to prevent memory exhaustion
    - Intelligent encoding detection
    - No retries: a failed call fails once, callers decide what to do

    Example:
        async with AsyncHttpClient() as client:
            response = await client.get("https://example.com", timeout=15.0)
            html = client.decode_content(response)
    """

    def __init__(
        self,
        user_agent: str | None = None,
        accept_language: str = "en-US,en;q=0.9",
        max_content_size: int = 20 * 1024 * 1024,
        proxy: str | None = None,
        default_timeout: float = 15.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            user_agent: Custom User-Agent string
            accept_language: Accept-Language header; consent and locale
                variants of many pages depend on it
            max_content_size: Maximum response size in bytes
            proxy: Proxy URL (http:// or socks5://)
            default_timeout: Timeout used when a call does not pass one
        """
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._accept_language = accept_language
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=10,
            ttl_dns_cache=300,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={
                "User-Agent": self._user_agent,
                "Accept-Language": self._accept_language,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request.

        Args:
            url: The URL to fetch
            timeout: Total time budget in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            FetchTimeout: The budget elapsed before headers and body arrived
            FetchHTTPError: The server answered with a non-2xx status
            FetchNetworkError: Transport failure or body over the size limit
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout

        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout_val),
                headers=headers,
                proxy=self._proxy,
                allow_redirects=True,
            ) as response:
                if not 200 <= response.status < 300:
                    raise FetchHTTPError(response.status, url=url, reason=response.reason)

                content_length = response.headers.get("Content-Length")
                if content_length and content_length.isdigit():
                    if int(content_length) > self._max_content_size:
                        raise FetchNetworkError(f"Content too large: {content_length} bytes", url=url)

                content = b""
                async for chunk in response.content.iter_chunked(8192):
                    content += chunk
                    if len(content) > self._max_content_size:
                        raise FetchNetworkError(
                            f"Content size limit exceeded: >{self._max_content_size} bytes",
                            url=url,
                        )

                return HttpResponse(
                    status_code=response.status,
                    content=content,
                    content_type=response.headers.get("Content-Type", ""),
                    headers=dict(response.headers),
                    url=str(response.url),
                )

        except asyncio.TimeoutError as e:
            raise FetchTimeout(f"Timed out after {timeout_val:.0f}s fetching {url}", url=url) from e
        except aiohttp.ClientError as e:
            raise FetchNetworkError(f"Network error fetching {url}: {e}", url=url) from e

    async def get_text(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[str, str]:
        """
        Fetch a URL and decode its body.

        Returns:
            Tuple of (decoded text, final URL after redirects)
        """
        response = await self.get(url, timeout=timeout, headers=headers)
        return self.decode_content(response), response.url

    async def get_json(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Fetch a URL and parse the body as JSON.

        Raises:
            FetchNetworkError: The body is not valid JSON
        """
        text, _ = await self.get_text(url, timeout=timeout, headers=headers)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FetchNetworkError(f"Invalid JSON from {url}: {e}", url=url) from e

    def decode_content(self, response: HttpResponse) -> str:
        """Decode response content to string."""
        return decode_content(response.content, response.content_type)
