"""Pure helpers for cleaning, merging, searching and summarizing transcripts."""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Sequence

from ...models.transcript import (
    KeyPhrase,
    Paragraph,
    ProcessedSegment,
    TranscriptMatch,
    TranscriptSegment,
    TranscriptStats,
)

READING_WORDS_PER_MINUTE = 200

STOP_WORDS = frozenset(
    {
        "the", "is", "at", "which", "on", "a", "an", "and", "or", "but",
        "in", "with", "to", "for", "of", "as", "by", "this", "that", "it",
        "from", "be", "are", "was", "were", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may", "might",
    }
)  # fmt: skip

_BRACKETED = re.compile(r"\[.*?\]")
_PARENTHESIZED = re.compile(r"\(.*?\)")
_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"\b\w+\b")


def clean_transcript_text(text: str) -> str:
    """Drop [Music]/(inaudible) style markers and normalize whitespace."""
    text = _BRACKETED.sub("", text)
    text = _PARENTHESIZED.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def format_time(seconds: float) -> str:
    """Format seconds as MM:SS (minutes are not wrapped into hours)."""
    minutes = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


def process_transcript_segments(segments: Sequence[TranscriptSegment]) -> list[ProcessedSegment]:
    """Clean segment text and add id, end time and word count.

    Word counts are taken from the raw text, before cleaning.
    """
    return [
        ProcessedSegment(
            id=index,
            start=segment.start,
            end=segment.start + segment.duration,
            duration=segment.duration,
            text=clean_transcript_text(segment.text),
            words=len(segment.text.split(" ")),
        )
        for index, segment in enumerate(segments)
    ]


def merge_short_segments(
    segments: Sequence[ProcessedSegment], min_duration: float = 3
) -> list[ProcessedSegment]:
    """Fold following segments into one until it lasts at least ``min_duration``."""
    merged: list[ProcessedSegment] = []
    current: ProcessedSegment | None = None

    for segment in segments:
        if current is None:
            current = segment.model_copy()
            continue

        if current.duration < min_duration:
            current = current.model_copy(
                update={
                    "text": f"{current.text} {segment.text}",
                    "duration": segment.end - current.start,
                    "end": segment.end,
                }
            )
        else:
            merged.append(current)
            current = segment.model_copy()

    if current is not None:
        merged.append(current)
    return merged


def search_transcript(segments: Sequence[ProcessedSegment], query: str) -> list[TranscriptMatch]:
    """Case-insensitive substring search with the neighbouring segments' text."""
    query_lower = query.lower()
    results = []
    for index, segment in enumerate(segments):
        if query_lower not in segment.text.lower():
            continue
        results.append(
            TranscriptMatch(
                **segment.model_dump(),
                index=index,
                context_before=segments[index - 1].text if index > 0 else None,
                context_after=segments[index + 1].text if index < len(segments) - 1 else None,
            )
        )
    return results


def get_transcript_stats(segments: Sequence[ProcessedSegment]) -> TranscriptStats:
    total_words = sum(segment.words for segment in segments)
    total_duration = segments[-1].end - segments[0].start if segments else 0.0

    wpm = math.floor(total_words / total_duration * 60 + 0.5) if total_duration > 0 else 0
    return TranscriptStats(
        segment_count=len(segments),
        total_words=total_words,
        total_duration=total_duration,
        average_words_per_minute=wpm,
        estimated_reading_time=math.ceil(total_words / READING_WORDS_PER_MINUTE),
    )


def extract_key_phrases(segments: Sequence[ProcessedSegment], top_n: int = 10) -> list[KeyPhrase]:
    """Most frequent words longer than three characters, stop words excluded.

    Ties keep first-occurrence order.
    """
    text = " ".join(segment.text for segment in segments).lower()
    frequency = Counter(
        word for word in _WORD.findall(text) if len(word) > 3 and word not in STOP_WORDS
    )
    ranked = sorted(frequency.items(), key=lambda item: item[1], reverse=True)[:top_n]
    return [KeyPhrase(word=word, count=count) for word, count in ranked]


def format_transcript_for_display(
    segments: Sequence[ProcessedSegment], segments_per_paragraph: int = 3
) -> list[Paragraph]:
    """Group consecutive segments into paragraphs."""
    paragraphs = []
    for i in range(0, len(segments), segments_per_paragraph):
        group = segments[i : i + segments_per_paragraph]
        paragraphs.append(
            Paragraph(
                start=group[0].start,
                end=group[-1].end,
                text=" ".join(segment.text for segment in group),
            )
        )
    return paragraphs
