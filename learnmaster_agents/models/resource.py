"""Learning resource records and verification results."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from .base import CamelModel


class VerificationStatus(CamelModel):
    """Outcome of URL and content checks for one resource."""

    url_accessible: bool = Field(..., description="URL parsed and responded")
    content_available: bool = Field(..., description="Content still exists")
    last_checked: datetime = Field(..., description="When the checks ran (UTC)")
    status_code: int | None = Field(None, description="HTTP status observed by the probe")
    error: str | None = Field(None, description="First error reported by the checks")


class QualityAssessment(CamelModel):
    """Per-axis quality scores plus the weighted overall score."""

    credibility: float = Field(..., ge=0.0, le=1.0)
    relevance: float = Field(..., ge=0.0, le=1.0)
    currency: float = Field(..., ge=0.0, le=1.0)
    accessibility: float = Field(..., ge=0.0, le=1.0)
    overall: float = Field(..., ge=0.0, le=1.0, description="Weighted sum, 2 decimals")


class Resource(CamelModel):
    """A single discoverable learning item (video, book, course, ...).

    Search providers may attach extra keys (thumbnail, duration, ...); they
    are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    url: str = Field(default="", description="Absolute URL of the resource")
    title: str = Field(..., description="Resource title")
    type: str | None = Field(
        None, description="video, book, academic_course, government_resource, article, ..."
    )
    creator: str | None = Field(None, description="Author, channel or institution")
    estimated_cost: str | None = Field(None, description="'Free', '$0', '$49', ...")
    relevance_score: float | None = Field(None, description="Relevance to the topic (0.0-1.0)")

    # Verification
    verified: bool | None = None
    verification_status: VerificationStatus | None = None
    quality_score: float | None = None
    quality_assessment: QualityAssessment | None = None

    # Objective matching
    matched_objectives: list[str] | None = None
    matched_concepts: list[str] | None = None
    match_reasoning: str | None = None


class VerifiedResults(CamelModel):
    """Resources grouped by source category, after verification."""

    sources: dict[str, list[Resource]] = Field(default_factory=dict)
    verification_timestamp: datetime | None = None
    verified_count: int = 0
    failed_count: int = 0
    warnings: list[str] = Field(default_factory=list)


class CategoryQuality(CamelModel):
    """Quality statistics for one source category."""

    total: int
    verified: int
    average_quality: float


class QualityReport(CamelModel):
    """Aggregate quality statistics and recommendations for a result set."""

    total_resources: int = 0
    verified_resources: int = 0
    average_quality_score: float = 0.0
    by_source_type: dict[str, CategoryQuality] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
