"""API request/response schemas for LearnMaster endpoints.

Request bodies accept camelCase or snake_case keys; responses are
serialized with camelCase keys.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from ...models.base import CamelModel
from ...models.research import ResearchResults
from ...models.resource import QualityReport, Resource, VerifiedResults
from ...models.transcript import Transcript, TranscriptAnalysis, VideoInfo

Level = Literal["beginner", "intermediate", "advanced"]

# ============================================================================
# Learning Path Schemas
# ============================================================================


class LearningPathRequest(CamelModel):
    """Request model for /v1/learning-paths.

    Attributes:
        topic: Subject to learn (1-500 chars)
        description: Optional extra context for the curriculum designer
        level: Learner level (default 'beginner')
        verify: Verify, score and filter the found resources
        min_quality_score: Threshold for the filtered view (default from config)
    """

    topic: str = Field(..., min_length=1, max_length=500, examples=["Machine learning"])
    description: str | None = Field(None, max_length=2000)
    level: Level = "beginner"
    verify: bool = False
    min_quality_score: float | None = Field(None, ge=0.0, le=1.0)

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, v: str) -> str:
        """Reject whitespace-only topics."""
        if not v.strip():
            raise ValueError("Topic cannot be empty or whitespace only")
        return v.strip()


# ============================================================================
# Verification Schemas
# ============================================================================


class VerifyResourcesRequest(CamelModel):
    """Request model for /v1/resources/verify."""

    sources: dict[str, list[Resource]] = Field(
        ..., description="Resources grouped by category (academic, videos, books, ...)"
    )
    min_quality_score: float | None = Field(None, ge=0.0, le=1.0)


class VerifyResourcesResponse(CamelModel):
    verification: VerifiedResults
    filtered: VerifiedResults
    report: QualityReport


# ============================================================================
# Research Schemas
# ============================================================================


class ResearchRequest(CamelModel):
    """Request model for /v1/research.

    Attributes:
        topic: Subject to research (1-500 chars)
        description: Optional context appended to every category query
        level: Learner level used for the video search
        verify: Verify and score the found resources per category
        min_quality_score: Threshold for the filtered view (default from config)
    """

    topic: str = Field(..., min_length=1, max_length=500, examples=["Wine making"])
    description: str | None = Field(None, max_length=2000)
    level: Level = "beginner"
    verify: bool = False
    min_quality_score: float | None = Field(None, ge=0.0, le=1.0)

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Topic cannot be empty or whitespace only")
        return v.strip()


class ResearchResponse(CamelModel):
    """Research results, plus verification output when requested."""

    research: ResearchResults
    verification: VerifiedResults | None = None
    filtered: VerifiedResults | None = None
    report: QualityReport | None = None


# ============================================================================
# Transcript Schemas
# ============================================================================


class TranscriptAnalysisRequest(CamelModel):
    topic: str = Field(..., min_length=1, max_length=500)
    level: Level = "beginner"


class TranscriptAnalysisResponse(CamelModel):
    """Analysis plus whether the heuristic fallback produced it."""

    analysis: TranscriptAnalysis
    fallback_used: bool
    reason: str | None = None


# ============================================================================
# Export Schemas
# ============================================================================


class MarkdownExportRequest(CamelModel):
    video: VideoInfo
    transcript: Transcript
    analysis: TranscriptAnalysis | None = None
    user_notes: str = ""
