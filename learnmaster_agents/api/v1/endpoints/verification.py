"""Resource verification endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ....core.config import get_settings
from ....services.verification import (
    ResourceVerifier,
    filter_quality_resources,
    generate_quality_report,
)
from ..dependencies import get_resource_verifier
from ..schemas import VerifyResourcesRequest, VerifyResourcesResponse

router = APIRouter(prefix="/v1", tags=["verification"])


@router.post(
    "/resources/verify",
    response_model=VerifyResourcesResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify and score resources",
    responses={
        200: {"description": "Verification finished (individual failures are reported inline)"},
        422: {"description": "Validation error"},
    },
)
async def verify_resources(
    request: VerifyResourcesRequest,
    verifier: ResourceVerifier = Depends(get_resource_verifier),
) -> VerifyResourcesResponse:
    """Verify every resource, then filter and report on quality."""
    min_quality_score = (
        request.min_quality_score
        if request.min_quality_score is not None
        else get_settings().MIN_QUALITY_SCORE
    )
    verification = await verifier.verify_resources(request.sources)
    return VerifyResourcesResponse(
        verification=verification,
        filtered=filter_quality_resources(verification, min_quality_score),
        report=generate_quality_report(verification),
    )
