"""Document export endpoints."""

from __future__ import annotations

import re

from fastapi import APIRouter
from fastapi.responses import Response

from ....services.export.markdown_exporter import export_transcript_markdown
from ..schemas import MarkdownExportRequest

router = APIRouter(prefix="/v1", tags=["exports"])

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def export_filename(title: str) -> str:
    stem = _UNSAFE_FILENAME_CHARS.sub("-", title).strip("-") or "transcript"
    return f"{stem}.md"


@router.post(
    "/exports/markdown",
    response_class=Response,
    summary="Export a transcript as Markdown",
    responses={200: {"content": {"text/markdown": {}}}, 422: {"description": "Validation error"}},
)
async def export_markdown(request: MarkdownExportRequest) -> Response:
    markdown = export_transcript_markdown(
        request.video, request.transcript, request.analysis, request.user_notes
    )
    return Response(
        content=markdown,
        media_type="text/markdown",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(request.video.title)}"'
        },
    )
