"""Learning path agents: structure design, stage search, matching, assembly."""

from .learning_path_agent import LearningPathAgent, LearningPathAgentDeps, LearningPathOutput
from .objective_matcher import ObjectiveMatcher
from .path_assembler import (
    assemble_knowledge_path,
    calculate_completeness,
    generate_path_summary,
    rate_completeness,
)
from .path_designer import PathStructureDesigner, create_fallback_structure
from .stage_search import ContentSearchFunction, search_content_for_stages

__all__ = [
    "ContentSearchFunction",
    "LearningPathAgent",
    "LearningPathAgentDeps",
    "LearningPathOutput",
    "ObjectiveMatcher",
    "PathStructureDesigner",
    "assemble_knowledge_path",
    "calculate_completeness",
    "create_fallback_structure",
    "generate_path_summary",
    "rate_completeness",
    "search_content_for_stages",
]
