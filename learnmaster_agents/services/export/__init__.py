"""Document export."""

from .markdown_exporter import export_transcript_markdown

__all__ = ["export_transcript_markdown"]
