"""Video, transcript and transcript-analysis records."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import CamelModel


class TranscriptSegment(CamelModel):
    """Raw caption segment, times in seconds."""

    start: float
    duration: float
    text: str


class ProcessedSegment(CamelModel):
    """Cleaned segment with end time and word count."""

    id: int
    start: float
    end: float
    duration: float
    text: str
    words: int


class Transcript(CamelModel):
    """Transcript for one video; ``available`` is False when fetching failed."""

    video_id: str
    available: bool
    segments: list[TranscriptSegment] = Field(default_factory=list)
    language: str | None = None
    fetched_at: datetime | None = None
    error: str | None = None


class TranscriptMatch(ProcessedSegment):
    """Segment matching a transcript search, with neighbouring text."""

    index: int
    context_before: str | None = None
    context_after: str | None = None


class TranscriptStats(CamelModel):
    segment_count: int
    total_words: int
    total_duration: float
    average_words_per_minute: int
    estimated_reading_time: int


class KeyPhrase(CamelModel):
    word: str
    count: int


class Paragraph(CamelModel):
    start: float
    end: float
    text: str


class Highlight(CamelModel):
    """An important moment in a video."""

    timestamp: float = Field(..., ge=0.0, description="Seconds from the start")
    text: str = ""
    reason: str = ""
    concepts: list[str] = Field(default_factory=list)
    importance: int = Field(default=5, description="1-10, higher is more important")


class TranscriptAnalysis(CamelModel):
    """Analysis object consumed by document export."""

    summary: str
    key_learnings: list[str] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    analyzed_at: datetime | None = None
    topic: str | None = None
    level: str | None = None


class VideoInfo(CamelModel):
    """Minimal video metadata used for exports."""

    id: str
    title: str
    channel_name: str | None = None
    duration: str | None = None
    views: int | None = None
