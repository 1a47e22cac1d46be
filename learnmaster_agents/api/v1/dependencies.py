"""Composition root for the API.

Settings are read here, once, and turned into explicitly configured
components. Every provider is a FastAPI dependency so tests can replace it
through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import Depends

from ...agents.learning_path_agent import LearningPathAgent, LearningPathAgentDeps
from ...agents.objective_matcher import ObjectiveMatcher
from ...agents.path_designer import PathStructureDesigner
from ...core.circuit_breaker import CircuitBreaker
from ...core.config import Settings, get_settings
from ...services.llm.chat_client import ChatCompletionClient
from ...services.llm.llm_factory import create_llm_client
from ...services.search.multi_source_research import MultiSourceResearcher
from ...services.search.searxng_client import SearxNGVideoSearch
from ...services.transcript.transcript_analyzer import TranscriptAnalyzer
from ...services.transcript.transcript_client import TranscriptClient
from ...services.verification.probes import (
    HttpxUrlProbe,
    OptimisticContentChecker,
    OptimisticUrlProbe,
    YouTubeOEmbedChecker,
)
from ...services.verification.resource_verifier import ResourceVerifier

logger = structlog.get_logger(__name__)


def _breaker(settings: Settings, name: str) -> CircuitBreaker:
    return CircuitBreaker(
        name=name,
        failure_threshold=settings.CIRCUIT_BREAKER_THRESHOLD,
        timeout=float(settings.CIRCUIT_BREAKER_TIMEOUT),
    )


@lru_cache
def get_llm_client() -> ChatCompletionClient | None:
    """Shared chat client (None when no API key is configured)."""
    return create_llm_client(get_settings())


@lru_cache
def get_search_provider() -> SearxNGVideoSearch:
    settings = get_settings()
    return SearxNGVideoSearch(
        base_url=settings.SEARXNG_BASE_URL,
        timeout=settings.SEARXNG_TIMEOUT,
        circuit_breaker=_breaker(settings, "searxng"),
    )


@lru_cache
def get_transcript_client() -> TranscriptClient:
    settings = get_settings()
    return TranscriptClient(
        base_url=settings.TRANSCRIPT_API_BASE_URL,
        timeout=settings.TRANSCRIPT_TIMEOUT,
        circuit_breaker=_breaker(settings, "transcripts"),
    )


@lru_cache
def get_resource_verifier() -> ResourceVerifier:
    """Verifier with real probes when enabled in settings, optimistic ones otherwise."""
    settings = get_settings()
    url_probe = (
        HttpxUrlProbe(timeout=settings.URL_PROBE_TIMEOUT)
        if settings.ENABLE_URL_PROBE
        else OptimisticUrlProbe()
    )
    content_checker = (
        YouTubeOEmbedChecker(timeout=settings.URL_PROBE_TIMEOUT)
        if settings.ENABLE_CONTENT_CHECK
        else OptimisticContentChecker()
    )
    logger.info(
        "resource_verifier_created",
        url_probe=type(url_probe).__name__,
        content_checker=type(content_checker).__name__,
    )
    return ResourceVerifier(url_probe=url_probe, content_checker=content_checker)


def get_multi_source_researcher(
    search_provider: SearxNGVideoSearch = Depends(get_search_provider),
) -> MultiSourceResearcher:
    return MultiSourceResearcher(search_provider)


def get_transcript_analyzer(
    llm_client: ChatCompletionClient | None = Depends(get_llm_client),
) -> TranscriptAnalyzer:
    return TranscriptAnalyzer(llm_client, get_settings().analysis_llm_config)


def get_learning_path_agent(
    llm_client: ChatCompletionClient | None = Depends(get_llm_client),
    search_provider: SearxNGVideoSearch = Depends(get_search_provider),
    verifier: ResourceVerifier = Depends(get_resource_verifier),
) -> LearningPathAgent:
    """Create LearningPathAgent with dependencies."""
    settings = get_settings()
    return LearningPathAgent(
        LearningPathAgentDeps(
            designer=PathStructureDesigner(llm_client, settings.structure_llm_config),
            matcher=ObjectiveMatcher(llm_client, settings.matching_llm_config),
            verifier=verifier,
            search_function=search_provider,
            max_results_per_stage=settings.STAGE_MAX_RESULTS,
        )
    )


async def close_clients() -> None:
    """Close HTTP clients created by the cached providers."""
    if get_llm_client.cache_info().currsize:
        client = get_llm_client()
        if client is not None:
            await client.close()
    if get_search_provider.cache_info().currsize:
        await get_search_provider().close()
    if get_transcript_client.cache_info().currsize:
        await get_transcript_client().close()
    if get_resource_verifier.cache_info().currsize:
        verifier = get_resource_verifier()
        for probe in (verifier.url_probe, verifier.content_checker):
            if isinstance(probe, (HttpxUrlProbe, YouTubeOEmbedChecker)):
                await probe.close()

    for provider in (
        get_llm_client,
        get_search_provider,
        get_transcript_client,
        get_resource_verifier,
    ):
        provider.cache_clear()
