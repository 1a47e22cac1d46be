"""Markdown export of a transcript with its analysis and the learner's notes."""

from __future__ import annotations

from datetime import datetime, timezone

from ...models.transcript import Highlight, Transcript, TranscriptAnalysis, VideoInfo
from ..transcript.transcript_processing import format_time

# A highlight belongs to the segment starting within this many seconds of it
HIGHLIGHT_WINDOW_SECONDS = 2
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
MISSING = "N/A"


def _find_highlight(analysis: TranscriptAnalysis | None, start: float) -> Highlight | None:
    if analysis is None:
        return None
    for highlight in analysis.highlights:
        if abs(highlight.timestamp - start) < HIGHLIGHT_WINDOW_SECONDS:
            return highlight
    return None


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items] + [""]


def export_transcript_markdown(
    video: VideoInfo,
    transcript: Transcript,
    analysis: TranscriptAnalysis | None = None,
    user_notes: str = "",
    generated_at: datetime | None = None,
) -> str:
    """Render a transcript as a Markdown study document.

    Args:
        video: Video metadata (title, channel, duration, views)
        transcript: Transcript whose segments are listed with deep links
        analysis: Optional analysis; adds summary, learnings, prerequisites,
            next steps and highlight markers
        user_notes: Learner notes, included when not blank
        generated_at: Footer date (now when omitted)

    Returns:
        Markdown text
    """
    watch_url = WATCH_URL.format(video_id=video.id)
    views = f"{video.views:,}" if video.views is not None else MISSING

    lines = [
        f"# {video.title}",
        "",
        f"**Channel:** {video.channel_name or MISSING}  ",
        f"**Duration:** {video.duration or MISSING}  ",
        f"**Views:** {views}  ",
        f"**Link:** [Watch on YouTube]({watch_url})  ",
        "",
        "---",
        "",
    ]

    if analysis is not None and analysis.summary:
        lines += ["## Summary", "", analysis.summary, ""]

    if analysis is not None and analysis.key_learnings:
        lines += ["## Key Learnings", ""]
        lines += [f"{i}. {learning}" for i, learning in enumerate(analysis.key_learnings, 1)]
        lines.append("")

    if analysis is not None and analysis.prerequisites:
        lines += ["## Prerequisites", ""] + _bullets(analysis.prerequisites)

    if user_notes.strip():
        lines += ["## Your Notes", "", user_notes, "", "---", ""]

    lines += ["## Transcript", ""]
    for segment in transcript.segments:
        highlight = _find_highlight(analysis, segment.start)
        link = f"{watch_url}&t={int(segment.start)}s"
        heading = f"### [{format_time(segment.start)}]({link})"
        if highlight is not None:
            heading += " ⭐"
        lines += [heading, "", f"> {segment.text}", ""]

        if highlight is not None:
            lines += [f"💡 **{highlight.reason}**", ""]
            if highlight.concepts:
                lines += [f"**Key Concepts:** {', '.join(highlight.concepts)}", ""]
            if highlight.importance:
                lines += [f"**Importance:** {highlight.importance}/10", ""]

        lines += ["---", ""]

    if analysis is not None and analysis.next_steps:
        lines += ["## Next Steps", ""] + _bullets(analysis.next_steps)

    generated = (generated_at or datetime.now(timezone.utc)).date().isoformat()
    lines += ["---", "", f"*Generated by The Learn Master on {generated}*", ""]
    return "\n".join(lines)
