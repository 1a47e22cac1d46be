"""Unit tests for SearxNGVideoSearch normalization, retries and fallback."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from learnmaster_agents.services.search.searxng_client import (
    SearxNGVideoSearch,
    build_search_query,
    to_video_resource,
)

SEARXNG_PAYLOAD = {
    "results": [
        {
            "url": "https://www.youtube.com/watch?v=abc",
            "title": "Python in 100 Seconds",
            "content": "A quick overview",
            "author": "Fireship",
            "thumbnail": "https://i.ytimg.com/vi/abc/hq.jpg",
            "length": "2:15",
            "engine": "youtube",
        },
        {"title": "missing url"},
        {
            "url": "https://vimeo.com/1",
            "title": "Python basics",
            "img_src": "https://vimeo.com/thumb.jpg",
        },
        {"url": "https://www.youtube.com/watch?v=def", "title": "Third"},
    ]
}


@pytest.fixture
def search(monkeypatch: pytest.MonkeyPatch) -> SearxNGVideoSearch:
    client = SearxNGVideoSearch(base_url="http://searx.local/")
    monkeypatch.setattr(client.circuit_breaker, "_sleep", AsyncMock())
    return client


def _respond(monkeypatch: pytest.MonkeyPatch, client: SearxNGVideoSearch, response: Any) -> list:
    calls: list[dict[str, Any]] = []

    async def fake_get(path: str, params: dict[str, Any], timeout: float) -> httpx.Response:
        calls.append({"path": path, "params": params, "timeout": timeout})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(client, "_get", fake_get)
    return calls


@pytest.mark.unit
@pytest.mark.parametrize(
    ("level", "expected"),
    [
        ("beginner", "Rust tutorial introduction explained educational"),
        ("intermediate", "Rust guide course educational"),
        ("advanced", "Rust advanced deep dive masterclass educational"),
        ("expert", "Rust tutorial educational"),
    ],
)
def test_build_search_query(level: str, expected: str) -> None:
    assert build_search_query("Rust", level) == expected


@pytest.mark.unit
class TestSearxNGVideoSearch:
    @pytest.mark.asyncio
    async def test_results_are_normalized(self, monkeypatch, search: SearxNGVideoSearch) -> None:
        calls = _respond(monkeypatch, search, httpx.Response(200, json=SEARXNG_PAYLOAD))

        results = await search.search("python", limit=10)

        assert [r.url for r in results] == [
            "https://www.youtube.com/watch?v=abc",
            "https://vimeo.com/1",
            "https://www.youtube.com/watch?v=def",
        ]
        first = results[0]
        assert first.type == "video"
        assert first.creator == "Fireship"
        assert first.estimated_cost == "Free"
        assert first.model_extra["duration"] == "2:15"
        assert results[1].model_extra["thumbnail"] == "https://vimeo.com/thumb.jpg"
        assert results[1].creator is None
        assert calls[0]["path"] == "http://searx.local/search"
        assert calls[0]["params"] == {
            "q": "python",
            "format": "json",
            "categories": "videos",
            "safesearch": 1,
        }

    @pytest.mark.asyncio
    async def test_limit_is_applied(self, monkeypatch, search: SearxNGVideoSearch) -> None:
        _respond(monkeypatch, search, httpx.Response(200, json=SEARXNG_PAYLOAD))

        results = await search.search("python", limit=1)

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_callable_adds_level_modifier(
        self, monkeypatch, search: SearxNGVideoSearch
    ) -> None:
        calls = _respond(monkeypatch, search, httpx.Response(200, json=SEARXNG_PAYLOAD))

        results = await search("Python Variables Fundamentals", level="beginner", max_results=2)

        assert len(results) == 2
        assert calls[0]["params"]["q"] == (
            "Python Variables Fundamentals tutorial introduction explained educational"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json=["unexpected"]),
            httpx.Response(200, json={"results": "nope"}),
        ],
    )
    async def test_bad_responses_return_empty(
        self, monkeypatch, search: SearxNGVideoSearch, response: httpx.Response
    ) -> None:
        _respond(monkeypatch, search, response)

        assert await search.search("python") == []

    @pytest.mark.asyncio
    async def test_search_web_returns_raw_hits(
        self, monkeypatch, search: SearxNGVideoSearch
    ) -> None:
        calls = _respond(monkeypatch, search, httpx.Response(200, json=SEARXNG_PAYLOAD))

        hits = await search.search_web("wine course site:edx.org", limit=2)

        assert [hit["url"] for hit in hits] == [
            "https://www.youtube.com/watch?v=abc",
            "https://vimeo.com/1",
        ]
        assert hits[0]["content"] == "A quick overview"
        assert calls[0]["params"]["categories"] == "general"

    @pytest.mark.asyncio
    async def test_timeouts_trigger_fallback(self, monkeypatch, search: SearxNGVideoSearch) -> None:
        """Given: every request times out
        When: searching
        Then: the initial attempt plus two retries run and [] is returned
        """
        calls = _respond(monkeypatch, search, httpx.TimeoutException("timed out"))

        results = await search.search("python", limit=5)

        assert results == []
        assert len(calls) == 3


@pytest.mark.unit
def test_to_video_resource_keeps_engine_metadata() -> None:
    resource = to_video_resource(SEARXNG_PAYLOAD["results"][0])

    assert resource.title == "Python in 100 Seconds"
    assert resource.model_extra["description"] == "A quick overview"
    assert resource.model_extra["engine"] == "youtube"
    assert resource.model_extra["thumbnail"] == "https://i.ytimg.com/vi/abc/hq.jpg"
