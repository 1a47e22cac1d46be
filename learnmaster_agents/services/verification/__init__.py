"""Resource verification, quality scoring and reporting."""

from .probes import (
    HttpxUrlProbe,
    OptimisticContentChecker,
    OptimisticUrlProbe,
    YouTubeOEmbedChecker,
    check_url,
)
from .quality_assessor import (
    assess_accessibility,
    assess_credibility,
    assess_currency,
    assess_quality,
    get_quality_weights,
)
from .quality_report import filter_quality_resources, generate_quality_report
from .resource_verifier import ResourceVerifier

__all__ = [
    "HttpxUrlProbe",
    "OptimisticContentChecker",
    "OptimisticUrlProbe",
    "ResourceVerifier",
    "YouTubeOEmbedChecker",
    "assess_accessibility",
    "assess_credibility",
    "assess_currency",
    "assess_quality",
    "check_url",
    "filter_quality_resources",
    "generate_quality_report",
    "get_quality_weights",
]
