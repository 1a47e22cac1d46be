"""Tests for ResourceVerifier and URL checks."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from learnmaster_agents.models.resource import Resource
from learnmaster_agents.services.verification.probes import (
    ContentCheck,
    HttpxUrlProbe,
    UrlCheck,
    YouTubeOEmbedChecker,
    check_url,
)
from learnmaster_agents.services.verification.resource_verifier import ResourceVerifier


class StaticUrlProbe:
    """Probe double answering from a fixed set of reachable URLs."""

    def __init__(self, reachable: set[str]) -> None:
        self.reachable = reachable
        self.probed: list[str] = []

    async def probe(self, url: str) -> UrlCheck:
        self.probed.append(url)
        if url in self.reachable:
            return UrlCheck(accessible=True, status_code=200)
        return UrlCheck(accessible=False, status_code=404, error="HTTP 404")


class MissingContentChecker:
    async def check(self, resource: Resource) -> ContentCheck:
        return ContentCheck(available=False, error="Video unavailable (HTTP 404)")


def _resources(n: int) -> list[Resource]:
    return [
        Resource(url=f"https://example.com/{i}", title=f"Resource {i}", type="book")
        for i in range(n)
    ]


@pytest.mark.unit
class TestCheckUrl:
    @pytest.mark.asyncio
    async def test_ftp_is_invalid_protocol(self) -> None:
        """Given: an ftp:// URL
        When: the URL is checked
        Then: it is not accessible and reports "Invalid protocol" without probing
        """
        probe = StaticUrlProbe(reachable=set())

        result = await check_url("ftp://files.example.com/book.pdf", probe)

        assert result.accessible is False
        assert result.error == "Invalid protocol"
        assert probe.probed == []

    @pytest.mark.asyncio
    async def test_relative_url_is_invalid(self) -> None:
        result = await check_url("not a url")

        assert result.accessible is False
        assert result.error is not None
        assert "Invalid URL" in result.error

    @pytest.mark.asyncio
    async def test_http_without_host_is_invalid(self) -> None:
        result = await check_url("https://")

        assert result.accessible is False
        assert "Invalid URL" in (result.error or "")

    @pytest.mark.asyncio
    async def test_default_probe_is_optimistic(self) -> None:
        result = await check_url("https://example.com/anything")

        assert result == UrlCheck(accessible=True, status_code=200)


@pytest.mark.unit
class TestVerifyResource:
    @pytest.mark.asyncio
    async def test_verified_resource_carries_status_and_quality(
        self, academic_resource: Resource
    ) -> None:
        verifier = ResourceVerifier()

        verified = await verifier.verify_resource(academic_resource, "academic")

        assert verified.verified is True
        assert verified.verification_status is not None
        assert verified.verification_status.url_accessible is True
        assert verified.verification_status.content_available is True
        assert verified.verification_status.status_code == 200
        assert verified.verification_status.error is None
        assert verified.quality_score == 0.93
        assert verified.quality_assessment is not None
        assert verified.quality_assessment.overall == verified.quality_score
        # input untouched
        assert academic_resource.verified is None

    @pytest.mark.asyncio
    async def test_verified_requires_content(self, academic_resource: Resource) -> None:
        verifier = ResourceVerifier(content_checker=MissingContentChecker())

        verified = await verifier.verify_resource(academic_resource, "academic")

        assert verified.verification_status.url_accessible is True
        assert verified.verification_status.content_available is False
        assert verified.verified is False
        assert verified.verification_status.error == "Video unavailable (HTTP 404)"

    @pytest.mark.asyncio
    async def test_ftp_resource_is_not_verified(self) -> None:
        verifier = ResourceVerifier()
        resource = Resource(url="ftp://example.com/file", title="File", type="book")

        verified = await verifier.verify_resource(resource, "books")

        assert verified.verified is False
        assert verified.verification_status.url_accessible is False
        assert verified.verification_status.error == "Invalid protocol"

    @pytest.mark.asyncio
    async def test_probe_exception_becomes_failed_record(self, academic_resource: Resource) -> None:
        """Given: a probe that raises
        When: the resource is verified
        Then: the error is captured with verified=False and quality 0
        """
        probe = AsyncMock()
        probe.probe.side_effect = RuntimeError("probe exploded")
        verifier = ResourceVerifier(url_probe=probe)

        verified = await verifier.verify_resource(academic_resource, "academic")

        assert verified.verified is False
        assert verified.quality_score == 0.0
        assert verified.verification_status.url_accessible is False
        assert verified.verification_status.content_available is False
        assert verified.verification_status.error == "probe exploded"


@pytest.mark.unit
class TestVerifyResources:
    @pytest.mark.asyncio
    async def test_two_of_four_verify(self) -> None:
        """Given: a category with 4 resources of which 2 are reachable
        When: the batch is verified
        Then: counts are 2/2 and one warning names the category
        """
        resources = _resources(4)
        probe = StaticUrlProbe(reachable={resources[0].url, resources[2].url})
        verifier = ResourceVerifier(url_probe=probe)

        results = await verifier.verify_resources({"books": resources})

        assert results.verified_count == 2
        assert results.failed_count == 2
        assert results.warnings == ["2 books resources could not be verified"]

    @pytest.mark.asyncio
    async def test_order_is_preserved_per_category(self) -> None:
        resources = _resources(5)
        verifier = ResourceVerifier()

        results = await verifier.verify_resources({"books": resources, "articles": resources[:2]})

        assert [r.url for r in results.sources["books"]] == [r.url for r in resources]
        assert [r.url for r in results.sources["articles"]] == [r.url for r in resources[:2]]
        assert list(results.sources) == ["books", "articles"]

    @pytest.mark.asyncio
    async def test_counts_cover_every_resource(self) -> None:
        books = _resources(3)
        bad = [Resource(url="ftp://x.org/a", title="bad", type="article")]
        verifier = ResourceVerifier()

        results = await verifier.verify_resources({"books": books, "articles": bad, "empty": []})

        total = sum(len(items) for items in results.sources.values())
        assert results.verified_count + results.failed_count == total == 4
        assert results.warnings == ["1 articles resources could not be verified"]
        assert results.verification_timestamp is not None

    @pytest.mark.asyncio
    async def test_input_is_not_mutated(self) -> None:
        resources = _resources(2)
        mapping = {"books": resources}

        await ResourceVerifier().verify_resources(mapping)

        assert mapping == {"books": resources}
        assert all(r.verified is None for r in resources)


@pytest.mark.unit
class TestHttpxProbes:
    @pytest.mark.asyncio
    async def test_head_probe_non_2xx_is_unreachable(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        probe = HttpxUrlProbe(client=httpx.AsyncClient(transport=transport))

        result = await probe.probe("https://example.com/missing")

        assert result.accessible is False
        assert result.status_code == 404
        assert result.error == "HTTP 404"

    @pytest.mark.asyncio
    async def test_head_probe_uses_head(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.method)
            return httpx.Response(200)

        probe = HttpxUrlProbe(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        result = await probe.probe("https://example.com/")

        assert result.accessible is True
        assert seen == ["HEAD"]

    @pytest.mark.asyncio
    async def test_head_probe_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        probe = HttpxUrlProbe(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        result = await probe.probe("https://slow.example.com/")

        assert result.accessible is False
        assert result.error == "Request timed out"

    @pytest.mark.asyncio
    async def test_oembed_checker_skips_non_youtube(self) -> None:
        checker = YouTubeOEmbedChecker(client=AsyncMock(spec=httpx.AsyncClient))

        result = await checker.check(Resource(url="https://example.com", title="page"))

        assert result.available is True
        checker._client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_oembed_checker_detects_removed_video(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        checker = YouTubeOEmbedChecker(client=httpx.AsyncClient(transport=transport))

        result = await checker.check(
            Resource(url="https://www.youtube.com/watch?v=gone", title="gone")
        )

        assert result.available is False
        assert "404" in (result.error or "")
