"""Multi-source research endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status

from ....core.config import get_settings
from ....services.search.multi_source_research import MultiSourceResearcher
from ....services.verification import (
    ResourceVerifier,
    filter_quality_resources,
    generate_quality_report,
)
from ..dependencies import get_multi_source_researcher, get_resource_verifier
from ..schemas import ResearchRequest, ResearchResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["research"])


@router.post(
    "/research",
    response_model=ResearchResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Research a topic across all source categories",
    description=(
        "Search courses, books, certifications, government resources, videos, articles "
        "and podcasts, then report coverage and content gaps"
    ),
    responses={
        200: {"description": "Research finished (empty categories are reported as gaps)"},
        422: {"description": "Validation error"},
    },
)
async def research_topic(
    request: ResearchRequest,
    researcher: MultiSourceResearcher = Depends(get_multi_source_researcher),
    verifier: ResourceVerifier = Depends(get_resource_verifier),
) -> ResearchResponse:
    """Research ``request.topic``; verify and score the results when asked."""
    research = await researcher.conduct_research(
        request.topic, request.description, level=request.level
    )
    if not request.verify:
        return ResearchResponse(research=research)

    min_quality_score = (
        request.min_quality_score
        if request.min_quality_score is not None
        else get_settings().MIN_QUALITY_SCORE
    )
    verification = await verifier.verify_resources(research.sources)
    logger.info(
        "research_verified",
        topic=request.topic,
        verified=verification.verified_count,
        failed=verification.failed_count,
    )
    return ResearchResponse(
        research=research,
        verification=verification,
        filtered=filter_quality_resources(verification, min_quality_score),
        report=generate_quality_report(verification),
    )
