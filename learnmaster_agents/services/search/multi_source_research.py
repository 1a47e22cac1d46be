"""Multi-source research over a SearxNG instance.

Seven source categories are searched concurrently: academic courses,
books, certifications, government resources, videos, articles and
podcasts. Web categories run against SearxNG's ``general`` category with
site filters; videos use the ``videos`` category. A category that fails
yields an empty list. Coverage estimates and content gaps are derived
from how many resources each category produced.

The returned ``sources`` mapping is keyed by verification category, so it
can be passed straight to ``ResourceVerifier.verify_resources``.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import urlparse

import structlog

from ...models.research import ContentGap, ResearchCoverage, ResearchResults
from ...models.resource import Resource
from .searxng_client import build_search_query

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WebCategory:
    """How one web source category is searched and normalized.

    Attributes:
        key: Verification category the results are filed under
        resource_type: ``Resource.type`` given to every hit
        query_suffix: Words appended to the topic
        site_filter: SearxNG site operators, empty for an open search
        limit: Hits kept from the search
        relevance_score: Relevance assigned to every hit
        default_cost: Cost used when the snippet names no price
    """

    key: str
    resource_type: str
    query_suffix: str
    site_filter: str = ""
    limit: int = 5
    relevance_score: float = 0.5
    default_cost: str = "Free"


WEB_CATEGORIES: tuple[WebCategory, ...] = (
    WebCategory(
        "academic",
        "academic_course",
        "course online",
        "site:coursera.org OR site:edx.org OR site:udacity.com",
        relevance_score=0.8,
        default_cost="Varies",
    ),
    WebCategory(
        "books",
        "book",
        "book",
        "site:amazon.com OR site:books.google.com",
        relevance_score=0.7,
        default_cost="$20-40",
    ),
    WebCategory(
        "certifications",
        "certification",
        "certification professional",
        limit=3,
        relevance_score=0.75,
        default_cost="Varies",
    ),
    WebCategory(
        "government",
        "government_resource",
        "government guide official",
        "site:.gov OR site:.edu",
        relevance_score=0.9,
    ),
    WebCategory("articles", "article", "tutorial guide article", limit=10, relevance_score=0.6),
    WebCategory(
        "podcasts",
        "podcast",
        "podcast",
        "site:spotify.com OR site:apple.com/podcasts",
        relevance_score=0.5,
    ),
)

# Category keys in the order results are reported
SOURCE_ORDER = (
    "academic",
    "books",
    "certifications",
    "government",
    "videos",
    "articles",
    "podcasts",
)

VIDEO_LIMIT = 20
VIDEO_RELEVANCE = 0.6

LOW_QUALITY_DOMAINS = ("pinterest", "facebook", "twitter", "instagram")

REGULATED_TOPICS = (
    "wine", "alcohol", "brewing", "distilling",
    "medical", "healthcare", "pharmacy",
    "legal", "law", "attorney",
    "financial", "accounting", "tax",
    "construction", "electrical", "plumbing",
    "food", "restaurant", "catering",
)

_PROVIDERS = (("coursera", "Coursera"), ("edx", "edX"), ("udacity", "Udacity"), ("udemy", "Udemy"))

_COST = re.compile(r"\$\d+(?:,\d{3})*(?:\.\d{2})?")
_COST_NUMBER = re.compile(r"\$?(\d+(?:,\d{3})*(?:\.\d{2})?)")
_HOURS = re.compile(r"(\d+)\s*(?:hours?|hrs?)", re.IGNORECASE)
_FIRST_INT = re.compile(r"\d+")
_AUTHOR = re.compile(r"by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")
_HOST = re.compile(r"hosted by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)", re.IGNORECASE)
_UNPRICED = ("Free", "Varies", "Unknown")


class ResearchSearch(Protocol):
    """The two SearxNG calls research needs (``SearxNGVideoSearch`` fits)."""

    async def search(self, query: str, *, limit: int = 10) -> list[Resource]: ...

    async def search_web(self, query: str, *, limit: int = 10) -> list[dict[str, Any]]: ...


def extract_domain(url: str) -> str:
    host = urlparse(url).hostname
    return host.replace("www.", "", 1) if host else "Unknown"


def extract_provider(url: str) -> str:
    for marker, name in _PROVIDERS:
        if marker in url:
            return name
    return extract_domain(url)


def extract_cost(text: str) -> str | None:
    match = _COST.search(text)
    return match.group(0) if match else None


def extract_hours(text: str) -> str | None:
    match = _HOURS.search(text)
    return f"{match.group(1)} hours" if match else None


def extract_level(text: str) -> str:
    if re.search(r"beginner|introductory|basics", text, re.IGNORECASE):
        return "Beginner"
    if re.search(r"advanced|expert|master", text, re.IGNORECASE):
        return "Advanced"
    if re.search(r"intermediate", text, re.IGNORECASE):
        return "Intermediate"
    return "All Levels"


def is_quality_source(url: str) -> bool:
    return not any(site in url for site in LOW_QUALITY_DOMAINS)


def requires_regulation(topic: str) -> bool:
    """True for topics where official regulatory guidance is expected."""
    lowered = topic.lower()
    return any(regulated in lowered for regulated in REGULATED_TOPICS)


def parse_cost(value: str | None) -> float:
    """First dollar amount in a cost label ("$20-40" -> 20); 0 when unpriced."""
    if not value or value in _UNPRICED:
        return 0.0
    match = _COST_NUMBER.search(value)
    return float(match.group(1).replace(",", "")) if match else 0.0


def parse_hours(value: Any) -> int:
    if not isinstance(value, str) or value in ("Unknown", "Varies"):
        return 0
    match = _FIRST_INT.search(value)
    return int(match.group(0)) if match else 0


def build_category_query(topic: str, description: str | None, category: WebCategory) -> str:
    base = f"{topic} {description}" if description else topic
    query = f"{base} {category.query_suffix}"
    return f"{query} {category.site_filter}" if category.site_filter else query


def to_research_resource(category: WebCategory, hit: dict[str, Any]) -> Resource:
    """Map one web hit to a resource of the category's type.

    Category-specific details parsed from the snippet (provider, hours,
    level, agency, publisher, host) are kept as extra fields.
    """
    url = hit["url"]
    snippet = hit.get("content") or ""
    fields: dict[str, Any] = {
        "url": url,
        "title": hit.get("title", ""),
        "type": category.resource_type,
        "description": snippet,
        "estimatedCost": extract_cost(snippet) or category.default_cost,
        "relevanceScore": category.relevance_score,
    }

    if category.key in ("academic", "certifications"):
        fields["provider"] = extract_provider(url)
        fields["estimatedHours"] = extract_hours(snippet) or "Unknown"
    if category.key == "academic":
        fields["level"] = extract_level(snippet)
    elif category.key == "books":
        author = _AUTHOR.search(snippet)
        fields["creator"] = author.group(1) if author else None
    elif category.key == "government":
        domain = extract_domain(url)
        fields["agency"] = domain.replace(".gov", "").replace(".edu", "").upper()
        fields["estimatedCost"] = "Free"
    elif category.key == "articles":
        fields["publisher"] = extract_domain(url)
        fields["estimatedCost"] = "Free"
    elif category.key == "podcasts":
        host = _HOST.search(snippet)
        fields["host"] = host.group(1) if host else "Unknown"
        fields["estimatedCost"] = "Free"

    return Resource.model_validate(fields)


def stage_coverage(sources: dict[str, list[Resource]]) -> int:
    """Coverage percentage implied by the per-category resource counts (capped at 100)."""

    def count(key: str) -> int:
        return len(sources.get(key, []))

    coverage = 0
    if count("academic") > 0:
        coverage += 30
    if count("academic") > 2:
        coverage += 20
    if count("books") > 0:
        coverage += 20
    if count("books") > 2:
        coverage += 10
    if count("certifications") > 0:
        coverage += 20
    if count("government") > 0:
        coverage += 10
    if count("videos") > 5:
        coverage += 10
    if count("articles") > 5:
        coverage += 5
    if count("podcasts") > 0:
        coverage += 5
    return min(coverage, 100)


def calculate_coverage(sources: dict[str, list[Resource]]) -> ResearchCoverage:
    per_stage = stage_coverage(sources)
    return ResearchCoverage(
        fundamentals=per_stage,
        reinforcement=per_stage,
        practical_application=per_stage,
        advanced_mastery=per_stage,
        overall=per_stage,
    )


def identify_content_gaps(
    sources: dict[str, list[Resource]], coverage: ResearchCoverage, topic: str
) -> list[ContentGap]:
    """List the resource kinds a learner of ``topic`` would be missing."""
    gaps: list[ContentGap] = []

    if not sources.get("academic"):
        gaps.append(
            ContentGap(
                type="academic_course",
                severity="high",
                title=f"Comprehensive {topic} Course",
                description=(
                    f"No structured academic courses found for {topic}. This makes it "
                    "difficult to learn fundamentals systematically."
                ),
                impact=(
                    "Users will need to piece together knowledge from multiple sources "
                    "without structured guidance."
                ),
                opportunity="HIGH - Creating a comprehensive course would fill a significant gap",
            )
        )

    if not sources.get("certifications"):
        gaps.append(
            ContentGap(
                type="certification",
                severity="medium",
                title=f"Professional {topic} Certification",
                description=(
                    f"No professional certifications found for {topic}. This makes it "
                    "harder to validate skills to employers."
                ),
                impact="Users cannot prove their expertise through recognized credentials.",
                opportunity=(
                    "MEDIUM - Certification programs require significant expertise and authority"
                ),
            )
        )

    if not sources.get("government") and requires_regulation(topic):
        gaps.append(
            ContentGap(
                type="government_guide",
                severity="high",
                title=f"Official {topic} Regulations and Guidelines",
                description=(
                    f"No government resources found for {topic}. This may indicate missing "
                    "legal/regulatory guidance."
                ),
                impact="Users may not understand legal requirements or compliance issues.",
                opportunity="LOW - Government creates these resources, not private creators",
                estimated_demand="Unknown",
            )
        )

    if coverage.practical_application < 50:
        gaps.append(
            ContentGap(
                type="practical_guide",
                severity="high",
                title=f"Practical Application Guide for {topic}",
                description=(
                    "Limited practical, hands-on resources found. Theory is covered but "
                    "application is weak."
                ),
                impact="Users will struggle to apply knowledge in real-world situations.",
                opportunity="HIGH - Practical guides and tutorials are highly valued",
            )
        )

    if coverage.advanced_mastery < 40:
        gaps.append(
            ContentGap(
                type="advanced_content",
                severity="medium",
                title=f"Advanced {topic} Techniques and Mastery",
                description=(
                    "Limited advanced-level content found. Beginners are well-served but "
                    "experts have few resources."
                ),
                impact="Users will hit a ceiling and cannot progress to expert level.",
                opportunity="MEDIUM - Advanced content requires deep expertise",
            )
        )

    return gaps


def calculate_totals(sources: dict[str, list[Resource]]) -> tuple[int, int]:
    """Total cost (dollars) and hours over every resource, rounded half-up."""
    total_cost = 0.0
    total_hours = 0
    for resources in sources.values():
        for resource in resources:
            total_cost += parse_cost(resource.estimated_cost)
            total_hours += parse_hours((resource.model_extra or {}).get("estimatedHours"))
    return int(total_cost + 0.5), total_hours


class MultiSourceResearcher:
    """Finds learning resources for a topic across all source categories.

    Args:
        search: SearxNG client (``search`` for videos, ``search_web`` for the rest)

    Example:
        >>> researcher = MultiSourceResearcher(SearxNGVideoSearch("http://localhost:8080"))
        >>> results = await researcher.conduct_research("Wine making", level="beginner")
        >>> verified = await verifier.verify_resources(results.sources)
    """

    def __init__(self, search: ResearchSearch) -> None:
        self.search = search

    async def _search_category(
        self, category: WebCategory, topic: str, description: str | None
    ) -> list[Resource]:
        query = build_category_query(topic, description, category)
        try:
            hits = await self.search.search_web(query, limit=category.limit)
        except Exception as e:
            logger.warning("research_category_failed", category=category.key, error=str(e))
            return []

        if category.key == "articles":
            hits = [hit for hit in hits if is_quality_source(hit["url"])]
        resources = [to_research_resource(category, hit) for hit in hits]
        logger.info("research_category_complete", category=category.key, found=len(resources))
        return resources

    async def _search_videos(
        self, topic: str, description: str | None, level: str
    ) -> list[Resource]:
        base = f"{topic} {description}" if description else topic
        try:
            videos = await self.search.search(build_search_query(base, level), limit=VIDEO_LIMIT)
        except Exception as e:
            logger.warning("research_category_failed", category="videos", error=str(e))
            return []

        logger.info("research_category_complete", category="videos", found=len(videos))
        return [
            video
            if video.relevance_score is not None
            else video.model_copy(update={"relevance_score": VIDEO_RELEVANCE})
            for video in videos
        ]

    async def conduct_research(
        self,
        topic: str,
        description: str | None = None,
        *,
        level: str = "beginner",
    ) -> ResearchResults:
        """Search every category concurrently and summarize what was found.

        Args:
            topic: Subject to research
            description: Optional extra context appended to every query
            level: Learner level used for the video query

        Returns:
            ResearchResults with ``sources`` holding every category key
            (empty lists for categories that found nothing or failed)
        """
        logger.info("research_start", topic=topic, level=level)

        web_results, videos = await asyncio.gather(
            asyncio.gather(
                *(
                    self._search_category(category, topic, description)
                    for category in WEB_CATEGORIES
                )
            ),
            self._search_videos(topic, description, level),
        )
        found = {
            category.key: resources for category, resources in zip(WEB_CATEGORIES, web_results)
        }
        found["videos"] = videos
        sources = {key: found[key] for key in SOURCE_ORDER}

        coverage = calculate_coverage(sources)
        gaps = identify_content_gaps(sources, coverage, topic)
        total_cost, estimated_hours = calculate_totals(sources)

        logger.info(
            "research_complete",
            topic=topic,
            total=sum(len(resources) for resources in sources.values()),
            coverage=coverage.overall,
            gaps=len(gaps),
        )
        return ResearchResults(
            topic=topic,
            description=description,
            timestamp=datetime.now(timezone.utc),
            sources=sources,
            coverage=coverage,
            gaps=gaps,
            total_cost=total_cost,
            estimated_hours=estimated_hours,
        )
