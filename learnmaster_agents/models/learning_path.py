"""Learning path structure, assembled knowledge path and summary records."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from .base import CamelModel
from .resource import Resource


class KeyConcept(CamelModel):
    """A concept a stage teaches."""

    concept: str
    importance: str = ""
    prerequisites: list[str] = Field(default_factory=list)


class Stage(CamelModel):
    """One phase of the curriculum.

    ``resources``, ``resource_count`` and ``status`` stay unset until the
    path is assembled.
    """

    id: int = Field(..., ge=1, description="1-based stage id, unique within a structure")
    title: str
    description: str = ""
    estimated_hours: float = 0
    learning_objectives: list[str] = Field(default_factory=list)
    key_concepts: list[KeyConcept] = Field(default_factory=list)
    assessment_checkpoint: str = ""

    resources: list[Resource] | None = None
    resource_count: int | None = None
    status: Literal["complete", "incomplete"] | None = None


class LearningPathStructure(CamelModel):
    """Curriculum skeleton produced by the path designer."""

    topic: str
    total_estimated_hours: float = 0
    difficulty: str = "beginner"
    prerequisites: list[str] = Field(default_factory=list)
    stages: list[Stage] = Field(..., min_length=1)
    learning_outcomes: list[str] = Field(default_factory=list)
    career_applications: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_stage_ids(self) -> LearningPathStructure:
        seen: set[int] = set()
        for stage in self.stages:
            if stage.id in seen:
                raise ValueError(f"Duplicate stage id {stage.id}")
            seen.add(stage.id)
        return self


class StageContent(CamelModel):
    """Search results for one stage, keyed by stage id."""

    stage_id: int
    content: list[Resource] = Field(default_factory=list)


CompletenessRating = Literal["Excellent", "Good", "Fair", "Needs Improvement"]


class Completeness(CamelModel):
    """How many stages have enough resources."""

    score: float = Field(..., ge=0.0, le=1.0)
    completed_stages: int
    total_stages: int
    rating: CompletenessRating
    missing_stages: list[str] = Field(default_factory=list)


class PathMetadata(CamelModel):
    created_at: datetime
    total_resources: int
    completeness: Completeness


class KnowledgePath(LearningPathStructure):
    """Fully assembled curriculum with resources attached per stage."""

    metadata: PathMetadata


class PathOverview(CamelModel):
    total_time: str
    difficulty: str
    stages: int
    resources: int
    completeness: CompletenessRating


class StageSummary(CamelModel):
    title: str
    time: str
    objectives: int
    resources: int
    status: str | None = None


class PathSummary(CamelModel):
    """Compact projection of a knowledge path for display."""

    title: str
    overview: PathOverview
    stages_summary: list[StageSummary]
    outcomes: list[str]
    next_steps: list[str]
