"""Transcript endpoints: retrieval and key-moment analysis."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ....models.transcript import Transcript
from ....services.transcript.transcript_analyzer import TranscriptAnalyzer
from ....services.transcript.transcript_client import TranscriptClient
from ..dependencies import get_transcript_analyzer, get_transcript_client
from ..schemas import TranscriptAnalysisRequest, TranscriptAnalysisResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["transcripts"])


@router.get(
    "/transcripts/{video_id}",
    response_model=Transcript,
    summary="Fetch a video transcript",
    description="Unavailable transcripts are returned with available=false and an error",
)
async def get_transcript(
    video_id: str,
    client: TranscriptClient = Depends(get_transcript_client),
) -> Transcript:
    return await client.fetch_video_transcript(video_id)


@router.post(
    "/transcripts/{video_id}/analysis",
    response_model=TranscriptAnalysisResponse,
    summary="Analyze a video transcript",
    responses={
        200: {"description": "Analysis produced (AI or heuristic)"},
        404: {"description": "No transcript available for the video"},
        422: {"description": "Validation error"},
    },
)
async def analyze_transcript(
    video_id: str,
    request: TranscriptAnalysisRequest,
    client: TranscriptClient = Depends(get_transcript_client),
    analyzer: TranscriptAnalyzer = Depends(get_transcript_analyzer),
) -> TranscriptAnalysisResponse:
    """Fetch the transcript and identify its key learning moments.

    Raises:
        HTTPException: 404 if the transcript is unavailable
    """
    transcript = await client.fetch_video_transcript(video_id)
    if not transcript.available:
        logger.info("transcript_analysis_skipped", video_id=video_id, error=transcript.error)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transcript not available: {transcript.error}",
        )

    outcome = await analyzer.analyze_transcript(transcript, request.topic, request.level)
    return TranscriptAnalysisResponse(
        analysis=outcome.value,
        fallback_used=outcome.fallback_used,
        reason=outcome.reason,
    )
