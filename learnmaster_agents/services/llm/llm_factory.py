"""LLM client factory.

Builds the chat client from settings once, at the composition root. A
missing API key is not an error: the factory returns ``None`` and every
AI-backed component falls back to its deterministic path.
"""

from __future__ import annotations

import structlog

from ...core.circuit_breaker import CircuitBreaker
from ...core.config import Settings
from .chat_client import ChatCompletionClient

logger = structlog.get_logger(__name__)


def create_llm_client(settings: Settings) -> ChatCompletionClient | None:
    """Create the chat client described by ``settings``.

    Args:
        settings: Application settings

    Returns:
        Configured client, or None when no API key is configured

    Example:
        >>> client = create_llm_client(get_settings())
        >>> designer = PathStructureDesigner(client, settings.structure_llm_config)
    """
    if not settings.ai_enabled:
        logger.warning("llm_disabled", reason="OPENAI_API_KEY not configured")
        return None

    breaker = CircuitBreaker(
        name="llm",
        failure_threshold=settings.CIRCUIT_BREAKER_THRESHOLD,
        timeout=float(settings.CIRCUIT_BREAKER_TIMEOUT),
    )
    logger.info(
        "llm_client_created",
        base_url=settings.OPENAI_BASE_URL,
        model=settings.LLM_MODEL,
        breaker_threshold=settings.CIRCUIT_BREAKER_THRESHOLD,
    )
    return ChatCompletionClient(
        api_key=settings.OPENAI_API_KEY or "",
        base_url=settings.OPENAI_BASE_URL,
        model=settings.LLM_MODEL,
        max_retries=settings.LLM_MAX_RETRIES,
        timeout=float(settings.LLM_TIMEOUT),
        circuit_breaker=breaker,
    )
