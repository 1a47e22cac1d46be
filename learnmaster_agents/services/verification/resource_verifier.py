"""Resource verification.

Checks that each resource's URL is well formed and reachable and that its
content still exists, then attaches a quality assessment. Verification of
one resource never raises: failures become ``verified=False`` records.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

import structlog

from ...models.resource import Resource, VerificationStatus, VerifiedResults
from .probes import (
    ContentChecker,
    OptimisticContentChecker,
    OptimisticUrlProbe,
    UrlProbe,
    check_url,
)
from .quality_assessor import assess_quality

logger = structlog.get_logger(__name__)


class ResourceVerifier:
    """Verifies resources and scores their quality.

    Args:
        url_probe: Reachability check (optimistic stub by default)
        content_checker: Content existence check (optimistic stub by default)

    Example:
        >>> verifier = ResourceVerifier(url_probe=HttpxUrlProbe(timeout=5.0))
        >>> results = await verifier.verify_resources({"videos": [resource]})
        >>> results.verified_count
        1
    """

    def __init__(
        self,
        url_probe: UrlProbe | None = None,
        content_checker: ContentChecker | None = None,
    ) -> None:
        self.url_probe = url_probe or OptimisticUrlProbe()
        self.content_checker = content_checker or OptimisticContentChecker()

    async def verify_resource(self, resource: Resource, source_type: str) -> Resource:
        """Verify one resource.

        Args:
            resource: Resource to verify
            source_type: Category used to weight the quality score

        Returns:
            Copy of the resource with ``verified``, ``verification_status``,
            ``quality_score`` and ``quality_assessment`` set
        """
        try:
            assessment = assess_quality(resource, source_type)
            url_check, content_check = await asyncio.gather(
                check_url(resource.url, self.url_probe),
                self.content_checker.check(resource),
            )
        except Exception as e:
            logger.error(
                "resource_verification_failed",
                title=resource.title,
                url=resource.url,
                error=str(e),
            )
            return resource.model_copy(
                update={
                    "verified": False,
                    "verification_status": VerificationStatus(
                        url_accessible=False,
                        content_available=False,
                        last_checked=datetime.now(timezone.utc),
                        error=str(e) or type(e).__name__,
                    ),
                    "quality_score": 0.0,
                }
            )

        return resource.model_copy(
            update={
                "verified": url_check.accessible and content_check.available,
                "verification_status": VerificationStatus(
                    url_accessible=url_check.accessible,
                    content_available=content_check.available,
                    last_checked=datetime.now(timezone.utc),
                    status_code=url_check.status_code,
                    error=url_check.error or content_check.error,
                ),
                "quality_score": assessment.overall,
                "quality_assessment": assessment,
            }
        )

    async def _verify_category(
        self, source_type: str, resources: Sequence[Resource]
    ) -> list[Resource]:
        logger.info("verifying_category", source_type=source_type, count=len(resources))
        return list(
            await asyncio.gather(
                *(self.verify_resource(resource, source_type) for resource in resources)
            )
        )

    async def verify_resources(
        self, research_results: Mapping[str, Sequence[Resource]]
    ) -> VerifiedResults:
        """Verify every resource of every category.

        Categories and resources are verified concurrently; each output list
        lines up index-for-index with its input list. The input is not
        modified.

        Args:
            research_results: Mapping of category name to resources

        Returns:
            VerifiedResults with per-category resources, counts and warnings
        """
        categories = list(research_results.keys())
        verified_lists = await asyncio.gather(
            *(
                self._verify_category(source_type, research_results[source_type])
                for source_type in categories
            )
        )

        result = VerifiedResults(verification_timestamp=datetime.now(timezone.utc))
        for source_type, verified in zip(categories, verified_lists):
            result.sources[source_type] = verified

            verified_in_type = sum(1 for r in verified if r.verified)
            failed_in_type = len(verified) - verified_in_type
            result.verified_count += verified_in_type
            result.failed_count += failed_in_type

            if failed_in_type > 0:
                result.warnings.append(
                    f"{failed_in_type} {source_type} resources could not be verified"
                )

        total = result.verified_count + result.failed_count
        rate = round(result.verified_count / total * 100) if total else 0
        logger.info(
            "verification_complete",
            verified=result.verified_count,
            total=total,
            verification_rate=rate,
        )
        if result.failed_count:
            logger.warning("verification_failures", failed=result.failed_count)

        return result
