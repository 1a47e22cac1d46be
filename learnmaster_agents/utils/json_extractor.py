"""Helpers for pulling JSON payloads out of LLM responses."""

from __future__ import annotations

import json
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def extract_json_from_markdown(content: str) -> str:
    """Extract JSON from markdown code blocks.

    Some LLM models wrap JSON responses in ```json...``` or ```...``` blocks.
    This function extracts the JSON content from such blocks.

    Args:
        content: Raw LLM response text

    Returns:
        Cleaned JSON string
    """
    content = content.strip()
    if not content.startswith("```"):
        return content

    lines = content.split("\n")
    json_lines = []
    in_code_block = False

    for line in lines:
        if line.strip().startswith("```"):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            json_lines.append(line)

    extracted = "\n".join(json_lines).strip()
    logger.debug("json_extracted_from_code_block", chars=len(extracted))
    return extracted


def find_embedded_json(text: str) -> Any | None:
    """Decode the first JSON object or array embedded in surrounding prose.

    Returns:
        The decoded value, or None when no ``{`` or ``[`` starts valid JSON
    """
    decoder = json.JSONDecoder()
    for index, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            value, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            continue
        return value
    return None


def parse_llm_json(content: str) -> Any:
    """Parse an LLM response body as JSON.

    Fenced replies are unwrapped first. When the remaining text is not JSON
    on its own, the first object or array inside it is used, so replies like
    ``Here is the plan: {...}`` still parse.

    Raises:
        json.JSONDecodeError: If the content holds no decodable JSON
    """
    text = extract_json_from_markdown(content)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        embedded = find_embedded_json(text)
        if embedded is None:
            raise
        logger.debug("json_found_in_prose", chars=len(text))
        return embedded
