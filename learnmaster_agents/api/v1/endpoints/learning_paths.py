"""Learning path endpoint.

Runs the full pipeline: curriculum design, per-stage search, objective
matching, assembly and (optionally) resource verification.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ....agents.learning_path_agent import LearningPathAgent, LearningPathOutput
from ....core.config import get_settings
from ..dependencies import get_learning_path_agent
from ..schemas import LearningPathRequest

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["learning-paths"])


@router.post(
    "/learning-paths",
    response_model=LearningPathOutput,
    status_code=status.HTTP_200_OK,
    summary="Create a learning path",
    description="Design a staged curriculum for a topic and attach ranked resources per stage",
    responses={
        200: {"description": "Learning path assembled"},
        422: {"description": "Validation error"},
        500: {"description": "Internal server error"},
    },
)
async def create_learning_path(
    request: LearningPathRequest,
    agent: LearningPathAgent = Depends(get_learning_path_agent),
) -> LearningPathOutput:
    """Create a knowledge path for ``request.topic``.

    Raises:
        HTTPException: 500 if the pipeline fails unexpectedly
    """
    min_quality_score = (
        request.min_quality_score
        if request.min_quality_score is not None
        else get_settings().MIN_QUALITY_SCORE
    )
    try:
        return await agent.run(
            request.topic,
            description=request.description,
            level=request.level,
            verify=request.verify,
            min_quality_score=min_quality_score,
        )
    except Exception as e:
        logger.error("learning_path_endpoint_failed", topic=request.topic, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Learning path generation failed: {e}",
        ) from e
