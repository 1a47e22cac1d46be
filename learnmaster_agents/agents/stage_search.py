"""Per-stage content search (tier 2 of the pipeline)."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, Union

import structlog

from ..models.learning_path import LearningPathStructure, Stage, StageContent
from ..models.resource import Resource

logger = structlog.get_logger(__name__)

DEFAULT_MAX_RESULTS = 5

STAGE_LEVELS = {
    "Fundamentals": "beginner",
    "Reinforcement": "intermediate",
    "Practical Application": "intermediate",
}
DEFAULT_STAGE_LEVEL = "advanced"

SearchItem = Union[Resource, Mapping[str, Any]]


class ContentSearchFunction(Protocol):
    """Injected search provider: ``await search(query, level=..., max_results=...)``."""

    async def __call__(
        self, query: str, *, level: str, max_results: int
    ) -> Sequence[SearchItem]: ...


def stage_level(stage: Stage) -> str:
    return STAGE_LEVELS.get(stage.title, DEFAULT_STAGE_LEVEL)


def build_stage_query(topic: str, stage: Stage) -> str:
    """Query = topic, key concept names, stage title."""
    keywords = " ".join(concept.concept for concept in stage.key_concepts)
    return f"{topic} {keywords} {stage.title}"


def _to_resource(item: SearchItem) -> Resource:
    if isinstance(item, Resource):
        return item
    return Resource.model_validate(dict(item))


async def _search_stage(
    topic: str,
    stage: Stage,
    search_function: ContentSearchFunction,
    max_results: int,
) -> StageContent:
    query = build_stage_query(topic, stage)
    level = stage_level(stage)
    logger.info("stage_search_start", stage_id=stage.id, query=query, level=level)

    try:
        results = await search_function(query, level=level, max_results=max_results)
        content = [_to_resource(item) for item in results]
    except Exception as e:
        logger.error("stage_search_failed", stage_id=stage.id, error=str(e))
        return StageContent(stage_id=stage.id, content=[])

    logger.info("stage_search_complete", stage_id=stage.id, results=len(content))
    return StageContent(stage_id=stage.id, content=content)


async def search_content_for_stages(
    structure: LearningPathStructure,
    search_function: ContentSearchFunction,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[StageContent]:
    """Search content for every stage concurrently.

    A stage whose search raises gets empty content; sibling stages are not
    affected. Consumers must match results to stages by ``stage_id``.

    Args:
        structure: Curriculum whose stages drive the queries
        search_function: Injected content search provider
        max_results: Results requested per stage

    Returns:
        One StageContent per stage
    """
    logger.info("stage_search_fanout", topic=structure.topic, stages=len(structure.stages))
    results = await asyncio.gather(
        *(
            _search_stage(structure.topic, stage, search_function, max_results)
            for stage in structure.stages
        )
    )
    return list(results)
