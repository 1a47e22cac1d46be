"""Reachability and content-existence checks used by the resource verifier.

Both checks are injected into ``ResourceVerifier`` so tests can swap them
for fakes. The optimistic implementations report success without any
network traffic; the httpx-backed ones issue bounded-time requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlparse

import httpx
import structlog

from ...models.resource import Resource

logger = structlog.get_logger(__name__)

ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class UrlCheck:
    accessible: bool
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class ContentCheck:
    available: bool
    error: str | None = None


class UrlProbe(Protocol):
    """Answers whether a well-formed http(s) URL is reachable."""

    async def probe(self, url: str) -> UrlCheck: ...


class ContentChecker(Protocol):
    """Answers whether a resource's content still exists."""

    async def check(self, resource: Resource) -> ContentCheck: ...


class OptimisticUrlProbe:
    """Reports every well-formed URL as reachable (no network)."""

    async def probe(self, url: str) -> UrlCheck:
        return UrlCheck(accessible=True, status_code=200)


class OptimisticContentChecker:
    """Reports every resource as available (no network)."""

    async def check(self, resource: Resource) -> ContentCheck:
        return ContentCheck(available=True)


class HttpxUrlProbe:
    """Header-only reachability probe.

    Sends ``HEAD`` with redirects followed; any non-2xx status, timeout or
    transport error is treated as unreachable.

    Args:
        timeout: Per-request timeout in seconds
        client: Optional shared AsyncClient (created lazily otherwise)
    """

    def __init__(self, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        await self._client.aclose()

    async def probe(self, url: str) -> UrlCheck:
        try:
            response = await self._client.head(url, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.warning("url_probe_timeout", url=url, timeout=self.timeout)
            return UrlCheck(accessible=False, error="Request timed out")
        except httpx.HTTPError as e:
            logger.warning("url_probe_error", url=url, error=str(e))
            return UrlCheck(accessible=False, error=str(e) or type(e).__name__)

        if response.is_success:
            return UrlCheck(accessible=True, status_code=response.status_code)

        logger.info("url_probe_non_2xx", url=url, status=response.status_code)
        return UrlCheck(
            accessible=False,
            status_code=response.status_code,
            error=f"HTTP {response.status_code}",
        )


class YouTubeOEmbedChecker:
    """Detects removed or private YouTube videos via the public oEmbed endpoint.

    Non-YouTube resources are reported as available.
    """

    OEMBED_URL = "https://www.youtube.com/oembed"

    def __init__(self, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def check(self, resource: Resource) -> ContentCheck:
        url = resource.url.lower()
        if "youtube.com" not in url and "youtu.be" not in url:
            return ContentCheck(available=True)

        try:
            response = await self._client.get(
                self.OEMBED_URL,
                params={"url": resource.url, "format": "json"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("oembed_check_error", url=resource.url, error=str(e))
            return ContentCheck(available=False, error=str(e) or type(e).__name__)

        if response.status_code == 200:
            return ContentCheck(available=True)
        return ContentCheck(
            available=False, error=f"Video unavailable (HTTP {response.status_code})"
        )


async def check_url(url: str, probe: UrlProbe | None = None) -> UrlCheck:
    """Validate a URL and ask the probe whether it is reachable.

    Args:
        url: Candidate absolute URL
        probe: Reachability probe (optimistic when omitted)

    Returns:
        UrlCheck; malformed URLs and non-http(s) schemes are never probed
    """
    try:
        parsed = urlparse(url)
        if not parsed.scheme:
            raise ValueError(f"Invalid URL: {url!r}")
        scheme = parsed.scheme.lower()
        if scheme in ALLOWED_SCHEMES and not parsed.netloc:
            raise ValueError(f"Invalid URL: {url!r}")
    except ValueError as e:
        return UrlCheck(accessible=False, error=str(e))

    if scheme not in ALLOWED_SCHEMES:
        return UrlCheck(accessible=False, error="Invalid protocol")

    return await (probe or OptimisticUrlProbe()).probe(url)
