"""Transcript retrieval from the public YouTube transcript proxy.

``GET {base_url}/api/transcript?videoId=...`` returns
``{"transcript": [{"offset": ms, "duration": ms, "text": str}], "language": str}``.
Fetch failures never raise: they produce an unavailable transcript that
carries the error message.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from ...core.circuit_breaker import CircuitBreaker
from ...models.transcript import Transcript, TranscriptSegment

logger = structlog.get_logger(__name__)

DEFAULT_LANGUAGE = "en"


class TranscriptUnavailableError(Exception):
    """Raised internally when the proxy has no usable transcript."""


class TranscriptClient:
    """Async client for the transcript proxy.

    Args:
        base_url: Proxy base URL
        timeout: Per-request timeout in seconds
        circuit_breaker: Breaker guarding the proxy (a fresh one by default)

    Example:
        >>> client = TranscriptClient("https://youtube-transcript-api.vercel.app")
        >>> transcript = await client.fetch_video_transcript("dQw4w9WgXcQ")
        >>> transcript.available
        True
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="transcripts")
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close underlying HTTP resources."""
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        """Internal GET wrapper (patched in tests)."""
        return await self._client.get(path, params=params, timeout=self.timeout)

    async def _fetch_direct(self, video_id: str) -> Transcript:
        response = await self._get(f"{self.base_url}/api/transcript", {"videoId": video_id})
        if response.status_code != 200:
            raise TranscriptUnavailableError(f"Transcript API error: {response.status_code}")

        data = response.json()
        if not isinstance(data, dict) or not data.get("transcript"):
            raise TranscriptUnavailableError("No transcript data in response")

        segments = [
            TranscriptSegment(
                start=item["offset"] / 1000,
                duration=item["duration"] / 1000,
                text=item["text"],
            )
            for item in data["transcript"]
        ]
        return Transcript(
            video_id=video_id,
            available=True,
            language=data.get("language") or DEFAULT_LANGUAGE,
            segments=segments,
            fetched_at=datetime.now(timezone.utc),
        )

    async def fetch_video_transcript(self, video_id: str) -> Transcript:
        """Fetch the transcript for one video.

        Returns:
            Available transcript with segments in seconds, or an unavailable
            transcript with ``error`` set
        """
        logger.info("transcript_fetch_start", video_id=video_id)
        try:
            transcript = await self.circuit_breaker.call(self._fetch_direct, video_id)
        except Exception as e:
            logger.warning("transcript_fetch_failed", video_id=video_id, error=str(e))
            return Transcript(video_id=video_id, available=False, error=str(e) or type(e).__name__)

        logger.info("transcript_fetched", video_id=video_id, segments=len(transcript.segments))
        return transcript

    async def fetch_multiple_transcripts(self, video_ids: Sequence[str]) -> list[Transcript]:
        """Fetch several transcripts concurrently, in input order."""
        logger.info("transcript_batch_fetch", count=len(video_ids))
        return list(
            await asyncio.gather(*(self.fetch_video_transcript(vid) for vid in video_ids))
        )
