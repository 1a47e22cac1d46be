"""Assemble the knowledge path and derive its completeness rating."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import structlog

from ..models.learning_path import (
    Completeness,
    CompletenessRating,
    KnowledgePath,
    LearningPathStructure,
    PathMetadata,
    PathOverview,
    PathSummary,
    StageContent,
    StageSummary,
)

logger = structlog.get_logger(__name__)

# A stage counts as completed once it has this many resources
MIN_RESOURCES_PER_STAGE = 3


def rate_completeness(score: float) -> CompletenessRating:
    """Map a completeness score to its rating (lower bounds inclusive)."""
    if score >= 0.9:
        return "Excellent"
    if score >= 0.7:
        return "Good"
    if score >= 0.5:
        return "Fair"
    return "Needs Improvement"


def _content_by_stage(stage_content: Sequence[StageContent]) -> dict[int, StageContent]:
    lookup: dict[int, StageContent] = {}
    for entry in stage_content:
        lookup.setdefault(entry.stage_id, entry)
    return lookup


def calculate_completeness(
    structure: LearningPathStructure, stage_content: Sequence[StageContent]
) -> Completeness:
    """Count stages holding at least three resources.

    Stages are matched to content by id. A structure without stages scores 0.
    """
    lookup = _content_by_stage(stage_content)
    total_stages = len(structure.stages)

    missing_stages = []
    completed_stages = 0
    for stage in structure.stages:
        entry = lookup.get(stage.id)
        if entry is not None and len(entry.content) >= MIN_RESOURCES_PER_STAGE:
            completed_stages += 1
        else:
            missing_stages.append(stage.title)

    score = completed_stages / total_stages if total_stages else 0.0
    return Completeness(
        score=score,
        completed_stages=completed_stages,
        total_stages=total_stages,
        rating=rate_completeness(score),
        missing_stages=missing_stages,
    )


def assemble_knowledge_path(
    structure: LearningPathStructure, stage_content: Sequence[StageContent]
) -> KnowledgePath:
    """Attach searched content to each stage and compute path metadata.

    Args:
        structure: Curriculum from the designer (not modified)
        stage_content: Per-stage content, in any order

    Returns:
        KnowledgePath with ``resources``, ``resource_count`` and ``status`` on
        every stage, plus creation time, resource total and completeness
    """
    lookup = _content_by_stage(stage_content)

    stages = []
    for stage in structure.stages:
        entry = lookup.get(stage.id)
        resources = list(entry.content) if entry is not None else []
        stages.append(
            stage.model_copy(
                update={
                    "resources": resources,
                    "resource_count": len(resources),
                    "status": "complete" if resources else "incomplete",
                }
            )
        )

    metadata = PathMetadata(
        created_at=datetime.now(timezone.utc),
        total_resources=sum(len(entry.content) for entry in stage_content),
        completeness=calculate_completeness(structure, stage_content),
    )
    path = KnowledgePath(
        **structure.model_dump(exclude={"stages"}),
        stages=stages,
        metadata=metadata,
    )

    logger.info(
        "knowledge_path_assembled",
        topic=path.topic,
        stages=len(path.stages),
        total_resources=metadata.total_resources,
        completeness=metadata.completeness.rating,
    )
    return path


def _hours(value: float) -> str:
    return f"{value:g} hours"


def generate_path_summary(path: KnowledgePath) -> PathSummary:
    """Reshape an assembled path into a compact summary."""
    return PathSummary(
        title=f"Complete Learning Path: {path.topic}",
        overview=PathOverview(
            total_time=_hours(path.total_estimated_hours),
            difficulty=path.difficulty,
            stages=len(path.stages),
            resources=path.metadata.total_resources,
            completeness=path.metadata.completeness.rating,
        ),
        stages_summary=[
            StageSummary(
                title=stage.title,
                time=_hours(stage.estimated_hours),
                objectives=len(stage.learning_objectives),
                resources=stage.resource_count or 0,
                status=stage.status,
            )
            for stage in path.stages
        ],
        outcomes=list(path.learning_outcomes),
        next_steps=list(path.next_steps),
    )
