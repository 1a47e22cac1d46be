"""Unit tests for TranscriptClient."""

from __future__ import annotations

import httpx
import pytest

from learnmaster_agents.services.transcript import TranscriptClient

PROXY_PAYLOAD = {
    "language": "en-US",
    "transcript": [
        {"offset": 0, "duration": 2500, "text": "Welcome to the course"},
        {"offset": 2500, "duration": 4000, "text": "Today we learn recursion"},
    ],
}


def _client(handler) -> TranscriptClient:
    client = TranscriptClient(base_url="https://transcripts.example.com/")
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


@pytest.mark.unit
class TestFetchVideoTranscript:
    @pytest.mark.asyncio
    async def test_offsets_are_converted_to_seconds(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=PROXY_PAYLOAD)

        transcript = await _client(handler).fetch_video_transcript("abc123")

        assert transcript.available is True
        assert transcript.language == "en-US"
        assert [(s.start, s.duration) for s in transcript.segments] == [(0.0, 2.5), (2.5, 4.0)]
        assert transcript.fetched_at is not None
        assert seen[0].url.path == "/api/transcript"
        assert seen[0].url.params["videoId"] == "abc123"

    @pytest.mark.asyncio
    async def test_language_defaults_to_english(self) -> None:
        payload = {"transcript": PROXY_PAYLOAD["transcript"]}

        client = _client(lambda r: httpx.Response(200, json=payload))

        transcript = await client.fetch_video_transcript("abc123")

        assert transcript.language == "en"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("response", "error"),
        [
            (httpx.Response(404), "Transcript API error: 404"),
            (httpx.Response(200, json={"transcript": []}), "No transcript data in response"),
            (httpx.Response(200, json={"error": "disabled"}), "No transcript data in response"),
        ],
    )
    async def test_missing_transcript_is_unavailable(
        self, response: httpx.Response, error: str
    ) -> None:
        transcript = await _client(lambda r: response).fetch_video_transcript("gone")

        assert transcript.available is False
        assert transcript.segments == []
        assert transcript.error == error

    @pytest.mark.asyncio
    async def test_network_error_is_captured(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transcript = await _client(handler).fetch_video_transcript("abc123")

        assert transcript.available is False
        assert "connection refused" in transcript.error


@pytest.mark.unit
class TestFetchMultipleTranscripts:
    @pytest.mark.asyncio
    async def test_results_follow_input_order(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["videoId"] == "bad":
                return httpx.Response(500)
            return httpx.Response(200, json=PROXY_PAYLOAD)

        transcripts = await _client(handler).fetch_multiple_transcripts(["one", "bad", "two"])

        assert [t.video_id for t in transcripts] == ["one", "bad", "two"]
        assert [t.available for t in transcripts] == [True, False, True]
