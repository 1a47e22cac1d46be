"""Transcript retrieval, processing and analysis."""

from .transcript_analyzer import TranscriptAnalyzer, basic_analysis, extract_concepts
from .transcript_client import TranscriptClient
from .transcript_processing import (
    clean_transcript_text,
    extract_key_phrases,
    format_time,
    format_transcript_for_display,
    get_transcript_stats,
    merge_short_segments,
    process_transcript_segments,
    search_transcript,
)

__all__ = [
    "TranscriptAnalyzer",
    "TranscriptClient",
    "basic_analysis",
    "clean_transcript_text",
    "extract_concepts",
    "extract_key_phrases",
    "format_time",
    "format_transcript_for_display",
    "get_transcript_stats",
    "merge_short_segments",
    "process_transcript_segments",
    "search_transcript",
]
