"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from learnmaster_agents.agents.path_designer import create_fallback_structure
from learnmaster_agents.models.learning_path import LearningPathStructure
from learnmaster_agents.models.resource import Resource
from learnmaster_agents.services.llm.chat_client import ChatCompletionClient
from learnmaster_agents.services.llm.schemas import ChatResult


def make_chat_result(content: Any) -> ChatResult:
    """Wrap a payload (serialized to JSON unless already a string) as a chat result."""
    text = content if isinstance(content, str) else json.dumps(content)
    return ChatResult(content=text, model="gpt-4.1-mini", finish_reason="stop")


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """Chat client double; set ``chat.return_value`` / ``chat.side_effect`` per test."""
    client = MagicMock(spec=ChatCompletionClient)
    client.chat = AsyncMock(return_value=make_chat_result("{}"))
    return client


@pytest.fixture
def sample_structure() -> LearningPathStructure:
    return create_fallback_structure("Python", "beginner")


@pytest.fixture
def academic_resource() -> Resource:
    return Resource(
        url="https://mit.edu/x",
        title="Intro to Computer Science",
        type="academic_course",
        estimated_cost="Free",
        relevance_score=0.9,
    )


@pytest.fixture
def video_resources() -> list[Resource]:
    return [
        Resource(
            url=f"https://www.youtube.com/watch?v=vid{i}",
            title=f"Python lesson {i}",
            type="video",
            creator="Crash Course",
            estimated_cost="Free",
        )
        for i in range(3)
    ]


class FakeSearch:
    """Content search double recording every call.

    Args:
        results_per_query: Items returned for each call
        failing_terms: Queries containing any of these raise RuntimeError
    """

    def __init__(self, results_per_query: int = 3, failing_terms: tuple[str, ...] = ()) -> None:
        self.results_per_query = results_per_query
        self.failing_terms = failing_terms
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, query: str, *, level: str, max_results: int) -> list[dict[str, Any]]:
        self.calls.append({"query": query, "level": level, "max_results": max_results})
        if any(term in query for term in self.failing_terms):
            raise RuntimeError(f"search failed for {query}")
        return [
            {
                "url": f"https://www.youtube.com/watch?v={abs(hash((query, i)))}",
                "title": f"{query} #{i}",
                "type": "video",
                "estimatedCost": "Free",
            }
            for i in range(self.results_per_query)
        ]


@pytest.fixture
def fake_search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def fake_search_factory() -> type[FakeSearch]:
    return FakeSearch


@pytest.fixture
def chat_result():
    """Factory fixture for ``ChatResult`` payloads."""
    return make_chat_result
