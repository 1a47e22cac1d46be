"""SearxNG video search.

Default content-search provider for the learning path pipeline: queries a
SearxNG instance in the ``videos`` category and normalizes hits into video
``Resource`` records. ``search_web`` returns raw hits from other categories
for multi-source research. Timeouts, non-200 responses and malformed JSON
all yield an empty list.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

import httpx
import structlog

from ...core.circuit_breaker import CircuitBreaker
from ...models.resource import Resource

logger = structlog.get_logger(__name__)

# Appended to the query so results match the learner's level
LEVEL_MODIFIERS: dict[str, str] = {
    "beginner": "tutorial introduction explained",
    "intermediate": "guide course",
    "advanced": "advanced deep dive masterclass",
}
DEFAULT_MODIFIER = "tutorial"


def build_search_query(topic: str, level: str) -> str:
    """Add level and educational keywords to a topic query."""
    modifier = LEVEL_MODIFIERS.get(level, DEFAULT_MODIFIER)
    return f"{topic} {modifier} educational"


def to_video_resource(item: dict[str, Any]) -> Resource:
    """Map one SearxNG hit to a free video resource; extra keys are kept."""
    return Resource(
        url=item["url"],
        title=item.get("title", ""),
        type="video",
        creator=item.get("author") or None,
        estimated_cost="Free",
        description=item.get("content", ""),
        thumbnail=item.get("thumbnail") or item.get("img_src"),
        duration=item.get("length"),
        engine=item.get("engine"),
    )


def parse_search_hits(response: httpx.Response, limit: int) -> list[dict[str, Any]]:
    """Raw SearxNG hits that carry a URL, at most ``limit``; [] on a bad response."""
    if response.status_code != 200:
        logger.warning("searxng_non_200", status=response.status_code)
        return []

    try:
        data = response.json()
    except ValueError as e:
        logger.error("searxng_json_parse_error", error=str(e))
        return []

    hits = data.get("results", []) if isinstance(data, dict) else []
    if not isinstance(hits, list):
        logger.warning("searxng_results_not_a_list")
        return []

    return [hit for hit in hits if isinstance(hit, dict) and hit.get("url")][:limit]


def parse_search_response(response: httpx.Response, limit: int) -> list[Resource]:
    """Normalize a SearxNG JSON response into video resources."""
    return [to_video_resource(hit) for hit in parse_search_hits(response, limit)]


class SearxNGVideoSearch:
    """Async client for the SearxNG search endpoint.

    Instances are callable with the content-search signature used by the
    stage searcher: ``await search(query, level=..., max_results=...)``.

    Args:
        base_url: Base URL to the SearxNG instance (e.g. http://localhost:8080)
        timeout: Per-request timeout in seconds (default 15.0)
        circuit_breaker: Breaker guarding the endpoint (a fresh one by default)

    Example:
        >>> search = SearxNGVideoSearch(base_url="http://localhost:8080")
        >>> videos = await search("python decorators", level="beginner", max_results=5)
        >>> assert videos and videos[0].type == "video"
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="searxng")
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close underlying HTTP resources."""
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any], timeout: float) -> httpx.Response:
        """Internal GET wrapper (patched in tests)."""
        return await self._client.get(path, params=params, timeout=timeout)

    async def __call__(self, query: str, *, level: str, max_results: int) -> list[Resource]:
        return await self.search(build_search_query(query, level), limit=max_results)

    async def search(
        self,
        query: str,
        *,
        limit: int = 10,
        categories: Sequence[str] = ("videos",),
        language: str | None = None,
        safesearch: int = 1,
    ) -> list[Resource]:
        """Perform a SearxNG search.

        Args:
            query: Search query string
            limit: Maximum number of results to return (default 10)
            categories: SearxNG categories (default: videos)
            language: Optional language code
            safesearch: 0=off, 1=moderate, 2=strict

        Returns:
            Video resources, at most ``limit``; empty on any failure
        """
        params = self._build_params(query, categories, language, safesearch)
        return await self._run(params, lambda response: parse_search_response(response, limit))

    async def search_web(
        self,
        query: str,
        *,
        limit: int = 10,
        categories: Sequence[str] = ("general",),
        safesearch: int = 1,
    ) -> list[dict[str, Any]]:
        """Search without normalization; hits keep SearxNG's keys (url, title, content).

        Returns:
            Raw hits, at most ``limit``; empty on any failure
        """
        params = self._build_params(query, categories, None, safesearch)
        return await self._run(params, lambda response: parse_search_hits(response, limit))

    def _build_params(
        self,
        query: str,
        categories: Sequence[str],
        language: str | None,
        safesearch: int,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"q": query, "format": "json"}
        if categories:
            params["categories"] = ",".join(categories)
        if language:
            params["language"] = language
        if safesearch in (0, 1, 2):
            params["safesearch"] = safesearch
        logger.info(
            "searxng_query_params_built", params={k: v for k, v in params.items() if k != "q"}
        )
        return params

    async def _run(
        self, params: dict[str, Any], parse: Callable[[httpx.Response], list[Any]]
    ) -> list[Any]:
        async def _do_search() -> list[Any]:
            response = await self._get(
                f"{self.base_url}/search", params=params, timeout=self.timeout
            )
            return parse(response)

        try:
            return await self.circuit_breaker.call_with_retries(
                _do_search,
                retries=2,
                backoff_base=0.5,
                backoff_factor=2.0,
                fallback=lambda: [],
            )
        except Exception as e:
            logger.error("searxng_search_failed", error=str(e))
            return []


__all__ = [
    "SearxNGVideoSearch",
    "build_search_query",
    "parse_search_hits",
    "parse_search_response",
    "to_video_resource",
]
