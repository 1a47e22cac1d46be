"""Match searched content to a stage's learning objectives."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from pydantic import Field, TypeAdapter

from ..core.config import LLMConfig
from ..models.base import CamelModel
from ..models.learning_path import Stage
from ..models.outcome import Outcome
from ..models.resource import Resource
from ..services.llm.chat_client import ChatCompletionClient
from ..services.llm.schemas import LLMClientError
from ..utils.json_extractor import parse_llm_json

logger = structlog.get_logger(__name__)

DEFAULT_MATCHING_CONFIG = LLMConfig(model="gpt-4.1-mini", temperature=0.3, max_tokens=1000)

MATCHING_PROMPT = """You are evaluating educational content for a learning stage.

Stage: {title}
Learning Objectives:
{objectives}

Key Concepts:
{concepts}

Content to evaluate:
{content}

For each piece of content, rate how well it matches the learning objectives (0-1 score).
Also identify which specific objectives and concepts it addresses.

Respond with JSON array:
[
  {{
    "contentIndex": 0,
    "relevanceScore": 0.0-1.0,
    "matchedObjectives": [0, 1],
    "matchedConcepts": ["concept name"],
    "reasoning": "brief explanation"
  }}
]"""


class ObjectiveMatch(CamelModel):
    """One entry of the matcher's JSON array."""

    content_index: int
    relevance_score: float | None = None
    matched_objectives: list[int] = Field(default_factory=list)
    matched_concepts: list[str] = Field(default_factory=list)
    reasoning: str | None = None


_matches_adapter = TypeAdapter(list[ObjectiveMatch])


def build_matching_prompt(stage: Stage, content: Sequence[Resource]) -> str:
    return MATCHING_PROMPT.format(
        title=stage.title,
        objectives="\n".join(
            f"{i + 1}. {objective}" for i, objective in enumerate(stage.learning_objectives)
        ),
        concepts="\n".join(f"- {c.concept}: {c.importance}" for c in stage.key_concepts),
        content="\n".join(f"{i + 1}. {item.title}" for i, item in enumerate(content)),
    )


def apply_matches(
    stage: Stage, content: Sequence[Resource], matches: Sequence[ObjectiveMatch]
) -> list[Resource]:
    """Merge matches onto content and sort by descending relevance.

    Items without a match keep their fields untouched. Objective indices
    outside the stage's objective list are dropped. The sort is stable and
    treats a missing score as 0.
    """
    by_index: dict[int, ObjectiveMatch] = {}
    for match in matches:
        by_index.setdefault(match.content_index, match)

    objectives = stage.learning_objectives
    enhanced = []
    for index, item in enumerate(content):
        match = by_index.get(index)
        if match is None:
            enhanced.append(item)
            continue
        enhanced.append(
            item.model_copy(
                update={
                    "relevance_score": match.relevance_score,
                    "matched_objectives": [
                        objectives[i] for i in match.matched_objectives if 0 <= i < len(objectives)
                    ],
                    "matched_concepts": list(match.matched_concepts),
                    "match_reasoning": match.reasoning,
                }
            )
        )

    return sorted(enhanced, key=lambda r: r.relevance_score or 0.0, reverse=True)


class ObjectiveMatcher:
    """Scores content against a stage's objectives with one batched LLM call.

    Args:
        llm_client: Chat client, or None to pass content through unchanged
        llm_config: Model, temperature and token limit for the matching call
    """

    def __init__(
        self,
        llm_client: ChatCompletionClient | None,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.llm_config = llm_config or DEFAULT_MATCHING_CONFIG

    async def match_content_to_objectives(
        self, stage: Stage, content: Sequence[Resource]
    ) -> Outcome[list[Resource]]:
        """Rank content by how well it covers the stage. Never raises.

        Empty content or a missing client returns the content as-is without
        any request. On failure the original list is returned with
        ``fallback_used`` set.
        """
        original = list(content)
        if not original:
            return Outcome.ok(original)
        if self.llm_client is None:
            return Outcome.fallback(original, "ai_disabled")

        try:
            result = await self.llm_client.chat(
                messages=[{"role": "user", "content": build_matching_prompt(stage, original)}],
                temperature=self.llm_config.temperature,
                max_tokens=self.llm_config.max_tokens,
                model=self.llm_config.model,
            )
            matches = _matches_adapter.validate_python(parse_llm_json(result.content))
        except LLMClientError as e:
            logger.error("objective_matching_llm_failed", stage_id=stage.id, error=str(e))
            return Outcome.fallback(original, "llm_error")
        except ValueError as e:
            logger.error("objective_matching_invalid_response", stage_id=stage.id, error=str(e))
            return Outcome.fallback(original, "invalid_response")
        except Exception as e:
            logger.error("objective_matching_failed", stage_id=stage.id, error=str(e))
            return Outcome.fallback(original, "llm_error")

        ranked = apply_matches(stage, original, matches)
        logger.info(
            "objective_matching_complete",
            stage_id=stage.id,
            items=len(ranked),
            matched=len(matches),
        )
        return Outcome.ok(ranked)
