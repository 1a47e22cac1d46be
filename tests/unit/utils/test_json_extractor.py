"""Tests for LLM JSON extraction helpers."""

from __future__ import annotations

import json

import pytest

from learnmaster_agents.utils.json_extractor import (
    extract_json_from_markdown,
    find_embedded_json,
    parse_llm_json,
)


@pytest.mark.unit
class TestExtractJsonFromMarkdown:
    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ('{"a": 1}', '{"a": 1}'),
            ('  {"a": 1}\n', '{"a": 1}'),
            ('```json\n{"a": 1}\n```', '{"a": 1}'),
            ('```\n[1, 2]\n```', "[1, 2]"),
            ('```json\n{\n  "a": 1\n}\n```\ntrailing prose', '{\n  "a": 1\n}'),
        ],
    )
    def test_extraction(self, content: str, expected: str) -> None:
        assert extract_json_from_markdown(content) == expected


@pytest.mark.unit
class TestParseLlmJson:
    def test_parses_fenced_array(self) -> None:
        assert parse_llm_json('```json\n[{"contentIndex": 0}]\n```') == [{"contentIndex": 0}]

    def test_invalid_json_raises_value_error(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            parse_llm_json("Sure! Here is the plan.")

        assert issubclass(json.JSONDecodeError, ValueError)

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ('Here is the plan: {"topic": "Rust"} Hope this helps!', {"topic": "Rust"}),
            ('Sure.\n```json\n[{"contentIndex": 1}]\n```', [{"contentIndex": 1}]),
            ('[Note] the structure follows. {"stages": []}', {"stages": []}),
        ],
    )
    def test_json_after_prose_is_found(self, content: str, expected) -> None:
        assert parse_llm_json(content) == expected


@pytest.mark.unit
def test_find_embedded_json_without_json_returns_none() -> None:
    assert find_embedded_json("Use {braces} and [brackets] freely") is None
