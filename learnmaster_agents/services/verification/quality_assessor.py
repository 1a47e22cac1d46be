"""Resource quality scoring.

Scores a resource on four axes (credibility, relevance, currency,
accessibility) and combines them with weights specific to the resource's
source category. The heuristics are fixed rules over URL, creator, type and
cost; they use no live data, so scores are deterministic.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple

from ...models.resource import QualityAssessment, Resource

DEFAULT_RELEVANCE = 0.5


class QualityWeights(NamedTuple):
    """Axis weights for one source category; always sums to 1.0."""

    credibility: float
    relevance: float
    currency: float
    accessibility: float


DEFAULT_WEIGHTS = QualityWeights(0.25, 0.25, 0.25, 0.25)

QUALITY_WEIGHTS: dict[str, QualityWeights] = {
    "academic": QualityWeights(0.4, 0.3, 0.2, 0.1),
    "government": QualityWeights(0.5, 0.2, 0.2, 0.1),
    "certifications": QualityWeights(0.4, 0.3, 0.2, 0.1),
    "books": QualityWeights(0.3, 0.3, 0.2, 0.2),
    "videos": QualityWeights(0.2, 0.4, 0.2, 0.2),
    "articles": QualityWeights(0.3, 0.3, 0.3, 0.1),
    "podcasts": QualityWeights(0.3, 0.3, 0.2, 0.2),
}

# (url substrings, score); first match wins
_AUTHORITY_RULES: tuple[tuple[tuple[str, ...], float], ...] = (
    ((".gov", ".edu"), 1.0),
    (("coursera", "edx"), 0.9),
    (("udacity", "mit.edu"), 0.9),
    (("amazon", "springer"), 0.8),
)
_BLOG_MARKERS = ("medium", "towards")
_EDUCATIONAL_CHANNELS = ("khan academy", "3blue1brown", "crash course", "ted-ed")

CURRENCY_BY_TYPE: dict[str, float] = {
    "government_resource": 0.9,
    "academic_course": 0.8,
    "video": 0.6,
    "book": 0.7,
}
DEFAULT_CURRENCY = 0.7

_FREE_COSTS = ("Free", "$0")
_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def round_score(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return math.floor(value * 100 + 0.5) / 100


def assess_credibility(resource: Resource) -> float:
    """Score how authoritative the resource's origin is."""
    url = resource.url.lower()

    for markers, score in _AUTHORITY_RULES:
        if any(marker in url for marker in markers):
            return score

    if "youtube.com" in url and resource.creator:
        creator = resource.creator.lower()
        if any(channel in creator for channel in _EDUCATIONAL_CHANNELS):
            return 0.8
        return 0.6

    if any(marker in url for marker in _BLOG_MARKERS):
        return 0.6

    return 0.5


def assess_currency(resource: Resource) -> float:
    """Score how up to date the resource is likely to be, by type."""
    return CURRENCY_BY_TYPE.get(resource.type or "", DEFAULT_CURRENCY)


def _parse_amount(cost: str) -> float | None:
    digits = re.sub(r"[^0-9.]", "", cost)
    match = _NUMBER.match(digits)
    return float(match.group(0)) if match else None


def assess_accessibility(resource: Resource) -> float:
    """Score how easy the resource is to access, by its cost."""
    cost = resource.estimated_cost

    if cost in _FREE_COSTS:
        return 1.0

    if isinstance(cost, str) and "$" in cost:
        amount = _parse_amount(cost)
        if amount is None:
            return 0.2
        if amount < 50:
            return 0.8
        if amount < 200:
            return 0.6
        if amount < 1000:
            return 0.4
        return 0.2

    # Unknown or varies
    return 0.5


def get_quality_weights(source_type: str) -> QualityWeights:
    """Weights for a source category; unknown categories weigh axes equally."""
    return QUALITY_WEIGHTS.get(source_type, DEFAULT_WEIGHTS)


def assess_quality(resource: Resource, source_type: str) -> QualityAssessment:
    """Score a resource on all axes and combine them for its category.

    Args:
        resource: Resource to score
        source_type: Category the resource was found under (academic, videos, ...)

    Returns:
        QualityAssessment whose ``overall`` is the weighted sum rounded to 2 decimals
    """
    relevance = (
        resource.relevance_score if resource.relevance_score is not None else DEFAULT_RELEVANCE
    )
    relevance = min(max(relevance, 0.0), 1.0)

    credibility = assess_credibility(resource)
    currency = assess_currency(resource)
    accessibility = assess_accessibility(resource)

    weights = get_quality_weights(source_type)
    overall = (
        credibility * weights.credibility
        + relevance * weights.relevance
        + currency * weights.currency
        + accessibility * weights.accessibility
    )

    return QualityAssessment(
        credibility=credibility,
        relevance=relevance,
        currency=currency,
        accessibility=accessibility,
        overall=round_score(overall),
    )
