"""LearningPathAgent: end-to-end learning path pipeline.

Workflow:
    1. Design the staged curriculum (AI or template)
    2. Search content for every stage in parallel
    3. Rank each stage's content against its objectives in parallel
    4. Assemble the knowledge path and its completeness rating
    5. Optionally verify every attached resource, then report and filter

Every step degrades instead of raising, so a run always produces a path.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from pydantic import Field

from ..models.base import CamelModel
from ..models.learning_path import KnowledgePath, PathSummary, Stage, StageContent
from ..models.resource import QualityReport, Resource, VerifiedResults
from ..services.verification import (
    ResourceVerifier,
    filter_quality_resources,
    generate_quality_report,
)
from .objective_matcher import ObjectiveMatcher
from .path_assembler import assemble_knowledge_path, generate_path_summary
from .path_designer import PathStructureDesigner
from .stage_search import DEFAULT_MAX_RESULTS, ContentSearchFunction, search_content_for_stages

logger = structlog.get_logger(__name__)

# Resource type -> verification category (selects the quality weights)
TYPE_CATEGORIES = {
    "video": "videos",
    "book": "books",
    "academic_course": "academic",
    "government_resource": "government",
    "article": "articles",
    "podcast": "podcasts",
    "certification": "certifications",
}
DEFAULT_CATEGORY = "other"


def category_for(resource: Resource) -> str:
    return TYPE_CATEGORIES.get(resource.type or "", DEFAULT_CATEGORY)


class LearningPathOutput(CamelModel):
    """Result of one pipeline run.

    Attributes:
        knowledge_path: Assembled path (verified records attached when verifying)
        summary: Compact projection of the path
        structure_fallback_used: True when the template structure was used
        match_fallback_stages: Ids of stages whose content was not AI-ranked
        verification: Verification results per category (verify runs only)
        quality_report: Aggregate quality report (verify runs only)
        filtered: Verified results above the quality threshold (verify runs only)
    """

    knowledge_path: KnowledgePath
    summary: PathSummary
    structure_fallback_used: bool = False
    match_fallback_stages: list[int] = Field(default_factory=list)
    verification: VerifiedResults | None = None
    quality_report: QualityReport | None = None
    filtered: VerifiedResults | None = None


@dataclass
class LearningPathAgentDeps:
    """Dependencies for LearningPathAgent.

    Attributes:
        designer: Curriculum designer
        matcher: Objective matcher
        verifier: Resource verifier
        search_function: Content search provider
        max_results_per_stage: Results requested per stage
    """

    designer: PathStructureDesigner
    matcher: ObjectiveMatcher
    verifier: ResourceVerifier
    search_function: ContentSearchFunction
    max_results_per_stage: int = DEFAULT_MAX_RESULTS


class LearningPathAgent:
    """Builds a knowledge path for a topic.

    Example:
        >>> agent = LearningPathAgent(deps)
        >>> output = await agent.run("Machine learning", level="beginner", verify=True)
        >>> output.summary.overview.completeness
        'Good'
    """

    def __init__(self, deps: LearningPathAgentDeps) -> None:
        self.deps = deps

    async def _match_stages(
        self, stages: Sequence[Stage], stage_content: list[StageContent]
    ) -> tuple[list[StageContent], list[int]]:
        stages_by_id = {stage.id: stage for stage in stages}
        matchable = [entry for entry in stage_content if entry.stage_id in stages_by_id]

        outcomes = await asyncio.gather(
            *(
                self.deps.matcher.match_content_to_objectives(
                    stages_by_id[entry.stage_id], entry.content
                )
                for entry in matchable
            )
        )

        matched_by_id = {
            entry.stage_id: StageContent(stage_id=entry.stage_id, content=outcome.value)
            for entry, outcome in zip(matchable, outcomes)
        }
        fallback_stages = [
            entry.stage_id for entry, outcome in zip(matchable, outcomes) if outcome.fallback_used
        ]
        matched = [matched_by_id.get(entry.stage_id, entry) for entry in stage_content]
        return matched, fallback_stages

    async def _verify_path(
        self, path: KnowledgePath
    ) -> tuple[KnowledgePath, VerifiedResults]:
        sources: dict[str, list[Resource]] = {}
        positions: dict[str, list[tuple[int, int]]] = {}
        for stage_index, stage in enumerate(path.stages):
            for resource_index, resource in enumerate(stage.resources or []):
                category = category_for(resource)
                sources.setdefault(category, []).append(resource)
                positions.setdefault(category, []).append((stage_index, resource_index))

        verification = await self.deps.verifier.verify_resources(sources)

        stage_resources = [list(stage.resources or []) for stage in path.stages]
        for category, verified in verification.sources.items():
            for (stage_index, resource_index), resource in zip(positions[category], verified):
                stage_resources[stage_index][resource_index] = resource

        stages = [
            stage.model_copy(update={"resources": resources})
            for stage, resources in zip(path.stages, stage_resources)
        ]
        return path.model_copy(update={"stages": stages}), verification

    async def run(
        self,
        topic: str,
        description: str | None = None,
        level: str = "beginner",
        verify: bool = False,
        min_quality_score: float = 0.5,
    ) -> LearningPathOutput:
        """Run the full pipeline.

        Args:
            topic: Subject to learn
            description: Optional extra context for the designer
            level: beginner, intermediate or advanced
            verify: Verify, report on and filter the attached resources
            min_quality_score: Threshold for the filtered view

        Returns:
            LearningPathOutput
        """
        logger.info("learning_path_start", topic=topic, level=level, verify=verify)

        structure_outcome = await self.deps.designer.design_learning_path_structure(
            topic, description, level
        )
        structure = structure_outcome.value
        if structure_outcome.fallback_used:
            logger.warning(
                "learning_path_structure_fallback", topic=topic, reason=structure_outcome.reason
            )

        stage_content = await search_content_for_stages(
            structure, self.deps.search_function, self.deps.max_results_per_stage
        )
        stage_content, match_fallback_stages = await self._match_stages(
            structure.stages, stage_content
        )

        path = assemble_knowledge_path(structure, stage_content)
        summary = generate_path_summary(path)

        output = LearningPathOutput(
            knowledge_path=path,
            summary=summary,
            structure_fallback_used=structure_outcome.fallback_used,
            match_fallback_stages=match_fallback_stages,
        )
        if not verify:
            logger.info("learning_path_complete", topic=topic, verified=False)
            return output

        verified_path, verification = await self._verify_path(path)
        output.knowledge_path = verified_path
        output.verification = verification
        output.quality_report = generate_quality_report(verification)
        output.filtered = filter_quality_resources(verification, min_quality_score)

        logger.info(
            "learning_path_complete",
            topic=topic,
            verified=True,
            verified_count=verification.verified_count,
            failed_count=verification.failed_count,
            average_quality=output.quality_report.average_quality_score,
        )
        return output
