"""Post-processing of verified results: quality filtering and reporting."""

from __future__ import annotations

import structlog

from ...models.resource import CategoryQuality, QualityReport, VerifiedResults
from .quality_assessor import round_score

logger = structlog.get_logger(__name__)

LOW_QUALITY_THRESHOLD = 0.6
MIN_VERIFIED_RATIO = 0.8

RECOMMEND_SUPPLEMENT = (
    "Overall content quality is moderate. "
    "Consider supplementing with additional high-quality sources."
)
RECOMMEND_VERIFIED_ONLY = (
    "Some resources could not be verified. We recommend focusing on verified sources only."
)
RECOMMEND_STRUCTURED_COURSE = (
    "No verified academic courses found. "
    "Consider enrolling in a structured course for systematic learning."
)


def filter_quality_resources(
    verified_results: VerifiedResults, min_quality_score: float = 0.5
) -> VerifiedResults:
    """Drop resources that are unverified or score below the threshold.

    Args:
        verified_results: Output of ``ResourceVerifier.verify_resources``
        min_quality_score: Minimum ``quality_score`` to keep (inclusive)

    Returns:
        New VerifiedResults; kept resources stay in their original order
    """
    removed = 0
    sources = {}
    for source_type, resources in verified_results.sources.items():
        kept = []
        for resource in resources:
            meets_quality = (resource.quality_score or 0.0) >= min_quality_score
            if meets_quality and resource.verified is True:
                kept.append(resource)
            else:
                removed += 1
                logger.debug(
                    "resource_filtered_out",
                    title=resource.title,
                    quality=resource.quality_score,
                    verified=resource.verified,
                )
        sources[source_type] = kept

    logger.info("quality_filter_applied", min_quality_score=min_quality_score, removed=removed)
    return verified_results.model_copy(
        update={"sources": sources, "warnings": list(verified_results.warnings)}
    )


def generate_quality_report(verified_results: VerifiedResults) -> QualityReport:
    """Summarize verification and quality per category.

    Averages only count verified resources and are 0 when none verified.
    """
    report = QualityReport(warnings=list(verified_results.warnings))

    total_quality = 0.0
    quality_count = 0

    for source_type, resources in verified_results.sources.items():
        verified = [r for r in resources if r.verified]
        category_quality = sum(r.quality_score or 0.0 for r in verified)
        average = category_quality / len(verified) if verified else 0.0

        report.by_source_type[source_type] = CategoryQuality(
            total=len(resources),
            verified=len(verified),
            average_quality=round_score(average),
        )
        report.total_resources += len(resources)
        report.verified_resources += len(verified)

        total_quality += category_quality
        quality_count += len(verified)

    report.average_quality_score = (
        round_score(total_quality / quality_count) if quality_count else 0.0
    )

    if report.average_quality_score < LOW_QUALITY_THRESHOLD:
        report.recommendations.append(RECOMMEND_SUPPLEMENT)

    if report.verified_resources < report.total_resources * MIN_VERIFIED_RATIO:
        report.recommendations.append(RECOMMEND_VERIFIED_ONLY)

    academic = report.by_source_type.get("academic")
    if academic is None or academic.verified == 0:
        report.recommendations.append(RECOMMEND_STRUCTURED_COURSE)

    return report
