"""Multi-source research results: categorized resources, coverage and gaps."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .base import CamelModel
from .resource import Resource


class ResearchCoverage(CamelModel):
    """Estimated coverage per learning stage, in percent (0-100)."""

    fundamentals: int = 0
    reinforcement: int = 0
    practical_application: int = 0
    advanced_mastery: int = 0
    overall: int = 0


class ContentGap(CamelModel):
    """A kind of resource the research could not find."""

    type: str
    severity: Literal["high", "medium", "low"]
    title: str
    description: str
    impact: str
    opportunity: str
    estimated_demand: str = "Unknown - requires market research"


class ResearchResults(CamelModel):
    """Resources found for a topic, keyed by verification category.

    ``sources`` has the shape ``ResourceVerifier.verify_resources`` consumes.
    """

    topic: str
    description: str | None = None
    timestamp: datetime
    sources: dict[str, list[Resource]] = Field(default_factory=dict)
    coverage: ResearchCoverage = Field(default_factory=ResearchCoverage)
    gaps: list[ContentGap] = Field(default_factory=list)
    total_cost: int = 0
    estimated_hours: int = 0
