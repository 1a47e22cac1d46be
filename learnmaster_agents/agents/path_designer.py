"""Learning path structure designer.

Tier 1 of the two-tier pipeline: asks the LLM for a staged curriculum
(fundamentals, reinforcement, practical application, advanced mastery)
and falls back to a fixed four-stage template whenever the AI path is
unavailable or returns something unusable.
"""

from __future__ import annotations

import structlog

from ..core.config import LLMConfig
from ..models.learning_path import KeyConcept, LearningPathStructure, Stage
from ..models.outcome import Outcome
from ..services.llm.chat_client import ChatCompletionClient
from ..services.llm.schemas import LLMClientError
from ..utils.json_extractor import parse_llm_json

logger = structlog.get_logger(__name__)

DEFAULT_STRUCTURE_CONFIG = LLMConfig(model="gpt-4.1-mini", temperature=0.7, max_tokens=2000)

FALLBACK_TOTAL_HOURS = {"beginner": 20, "intermediate": 40}
FALLBACK_TOTAL_HOURS_DEFAULT = 60

STRUCTURE_PROMPT = """You are an expert learning path architect. Design a comprehensive, structured learning journey for someone who wants to learn about: "{topic}"

Additional context: {description}
Current level: {level}

Design a learning path with these stages:
1. FUNDAMENTALS - Core concepts and prerequisites
2. REINFORCEMENT - Practice and deeper understanding
3. PRACTICAL APPLICATION - Hands-on skills and real-world use
4. ADVANCED MASTERY - Expert-level knowledge and specialization

For each stage, identify:
- Learning objectives (what they should know/be able to do)
- Key concepts to master
- Prerequisites (if any)
- Estimated time to complete
- Assessment checkpoints

Respond with JSON in this exact format:
{{
  "topic": "{topic}",
  "totalEstimatedHours": number,
  "difficulty": "beginner|intermediate|advanced",
  "prerequisites": ["list of prerequisites"],
  "stages": [
    {{
      "id": 1,
      "title": "Fundamentals",
      "description": "brief description",
      "estimatedHours": number,
      "learningObjectives": ["objective 1", "objective 2"],
      "keyConcepts": [
        {{
          "concept": "concept name",
          "importance": "why this matters",
          "prerequisites": ["what you need to know first"]
        }}
      ],
      "assessmentCheckpoint": "how to verify mastery"
    }}
  ],
  "learningOutcomes": ["what you'll be able to do after completion"],
  "careerApplications": ["how this knowledge is used professionally"],
  "nextSteps": ["what to learn after mastering this"]
}}"""


def build_structure_prompt(topic: str, description: str | None, level: str) -> str:
    return STRUCTURE_PROMPT.format(
        topic=topic,
        description=description or "No additional context provided",
        level=level,
    )


def create_fallback_structure(topic: str, level: str) -> LearningPathStructure:
    """Build the fixed four-stage template used when the AI path is unavailable.

    Args:
        topic: Subject to learn
        level: Learner level; unknown levels get the advanced hour budget

    Returns:
        Structure with stages Fundamentals, Reinforcement, Practical
        Application and Advanced Mastery (8, 8, 12 and 12 hours)
    """
    return LearningPathStructure(
        topic=topic,
        total_estimated_hours=FALLBACK_TOTAL_HOURS.get(level, FALLBACK_TOTAL_HOURS_DEFAULT),
        difficulty=level,
        prerequisites=[],
        stages=[
            Stage(
                id=1,
                title="Fundamentals",
                description=f"Learn the core concepts of {topic}",
                estimated_hours=8,
                learning_objectives=[
                    f"Understand what {topic} is and why it matters",
                    "Learn fundamental terminology and concepts",
                    "Identify key principles and best practices",
                ],
                key_concepts=[
                    KeyConcept(
                        concept="Basic Concepts",
                        importance="Foundation for all future learning",
                        prerequisites=[],
                    )
                ],
                assessment_checkpoint="Can explain core concepts to a beginner",
            ),
            Stage(
                id=2,
                title="Reinforcement",
                description=f"Deepen your understanding of {topic}",
                estimated_hours=8,
                learning_objectives=[
                    "Apply concepts to simple scenarios",
                    "Understand common patterns and techniques",
                    "Recognize and avoid common mistakes",
                ],
                key_concepts=[
                    KeyConcept(
                        concept="Practical Techniques",
                        importance="Enables real-world application",
                        prerequisites=["Basic Concepts"],
                    )
                ],
                assessment_checkpoint="Can apply concepts to solve simple problems",
            ),
            Stage(
                id=3,
                title="Practical Application",
                description=f"Apply {topic} to real-world scenarios",
                estimated_hours=12,
                learning_objectives=[
                    "Complete hands-on projects",
                    "Solve real-world problems",
                    "Build portfolio-worthy work",
                ],
                key_concepts=[
                    KeyConcept(
                        concept="Real-World Application",
                        importance="Demonstrates mastery",
                        prerequisites=["Basic Concepts", "Practical Techniques"],
                    )
                ],
                assessment_checkpoint="Can complete projects independently",
            ),
            Stage(
                id=4,
                title="Advanced Mastery",
                description=f"Master advanced aspects of {topic}",
                estimated_hours=12,
                learning_objectives=[
                    "Understand advanced techniques",
                    "Optimize for performance and quality",
                    "Teach others and contribute to the field",
                ],
                key_concepts=[
                    KeyConcept(
                        concept="Advanced Techniques",
                        importance="Separates experts from practitioners",
                        prerequisites=["Real-World Application"],
                    )
                ],
                assessment_checkpoint="Can mentor others and solve complex problems",
            ),
        ],
        learning_outcomes=[
            f"Comprehensive understanding of {topic}",
            "Ability to apply knowledge to real-world scenarios",
            "Confidence to teach others",
        ],
        career_applications=["Professional use in relevant fields"],
        next_steps=["Specialize in advanced topics", "Contribute to the community"],
    )


class PathStructureDesigner:
    """Designs the staged curriculum for a topic.

    Args:
        llm_client: Chat client, or None to always use the template
        llm_config: Model, temperature and token limit for the design call

    Example:
        >>> designer = PathStructureDesigner(client, settings.structure_llm_config)
        >>> outcome = await designer.design_learning_path_structure("Kubernetes")
        >>> outcome.value.stages[0].title
        'Fundamentals'
    """

    def __init__(
        self,
        llm_client: ChatCompletionClient | None,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.llm_config = llm_config or DEFAULT_STRUCTURE_CONFIG

    async def design_learning_path_structure(
        self,
        topic: str,
        description: str | None = None,
        level: str = "beginner",
    ) -> Outcome[LearningPathStructure]:
        """Design a learning path structure. Never raises.

        Returns:
            Outcome holding the AI structure, or the template with
            ``fallback_used`` set and the reason
        """
        logger.info("structure_design_start", topic=topic, level=level)

        if self.llm_client is None:
            logger.warning("structure_design_ai_disabled", topic=topic)
            return Outcome.fallback(create_fallback_structure(topic, level), "ai_disabled")

        prompt = build_structure_prompt(topic, description, level)
        try:
            result = await self.llm_client.chat(
                messages=[{"role": "user", "content": prompt}],
                temperature=self.llm_config.temperature,
                max_tokens=self.llm_config.max_tokens,
                model=self.llm_config.model,
            )
            structure = LearningPathStructure.model_validate(parse_llm_json(result.content))
        except LLMClientError as e:
            logger.error("structure_design_llm_failed", topic=topic, error=str(e))
            return Outcome.fallback(create_fallback_structure(topic, level), "llm_error")
        except ValueError as e:
            # JSONDecodeError and pydantic ValidationError are both ValueErrors
            logger.error("structure_design_invalid_response", topic=topic, error=str(e))
            return Outcome.fallback(create_fallback_structure(topic, level), "invalid_response")
        except Exception as e:
            logger.error("structure_design_failed", topic=topic, error=str(e))
            return Outcome.fallback(create_fallback_structure(topic, level), "llm_error")

        logger.info("structure_design_complete", topic=topic, stages=len(structure.stages))
        return Outcome.ok(structure)
