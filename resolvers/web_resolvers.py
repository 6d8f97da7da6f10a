"""
Web Resolvers
Single-tier resolvers sharing one shape:
web search (site filters) -> heuristic field extraction -> relevance scoring
"""
import logging
from typing import Any, Dict, List, Sequence, Tuple

from config.settings import Settings
from models import Candidate, LearningRequest, SourceResult, SourceType
from scoring.relevance import RelevanceScorer
from sources.connectors import WebHit, build_site_query, web_search
from sources.extraction import (
    extract_agency,
    extract_author,
    extract_cost,
    extract_domain,
    extract_format,
    extract_hours,
    extract_host,
    extract_level,
    extract_prerequisites,
    extract_provider,
    is_quality_source,
    parse_cost,
)

from .base import SourceResolver


logger = logging.getLogger(__name__)


class WebSearchResolver(SourceResolver):
    """
    Base for resolvers backed by a site-filtered web search.

    Subclasses set the query suffix, site filters, result limit and source
    prior, and override ``extract`` to pull type-specific fields.
    """

    kind: SourceType = SourceType.ARTICLE
    query_suffix: str = ""
    sites: Tuple[str, ...] = ()
    limit: int = 5
    source_prior: float = 0.5
    label: str = "Web"

    def __init__(self, settings: Settings, scorer: RelevanceScorer):
        self.settings = settings
        self.scorer = scorer

    @property
    def source_type(self) -> SourceType:
        return self.kind

    def build_query(self, request: LearningRequest) -> str:
        parts = [request.topic, request.description, self.query_suffix]
        base = " ".join(part for part in parts if part)
        return build_site_query(base, self.sites)

    def accept(self, hit: WebHit) -> bool:
        return True

    def origin(self, hit: WebHit) -> str:
        return extract_domain(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {}

    def to_candidate(self, hit: WebHit) -> Candidate:
        signals = {
            "description": hit.snippet,
            "domain": extract_domain(hit.url),
            "source_prior": self.source_prior,
        }
        signals.update(self.extract(hit))
        return Candidate(
            source_type=self.kind,
            title=hit.title,
            origin=self.origin(hit),
            url=hit.url,
            raw_signals=signals,
        )

    async def resolve(self, request: LearningRequest) -> SourceResult:
        query = self.build_query(request)
        logger.info(f"[{self.label}] Searching: {query}")
        hits = await web_search(query, self.settings.web_search, timeout=self.settings.general.request_timeout)

        candidates = [self.to_candidate(hit) for hit in hits if self.accept(hit)][: self.limit]
        ranked = self.scorer.rank(candidates, request.topic, request.level)
        logger.info(f"[{self.label}] kept {len(ranked)} of {len(hits)} results")
        return SourceResult(source_type=self.kind, candidates=ranked)


def _priced(text: str, default_label: str) -> Dict[str, Any]:
    label = extract_cost(text) or default_label
    return {"cost_label": label, "cost": parse_cost(label)}


class AcademicCourseResolver(WebSearchResolver):
    kind = SourceType.COURSE
    query_suffix = "course online"
    sites = ("coursera.org", "edx.org", "udacity.com")
    limit = 5
    source_prior = 0.8
    label = "Academic"

    def origin(self, hit: WebHit) -> str:
        return extract_provider(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {
            **_priced(hit.snippet, "Varies"),
            "hours": extract_hours(hit.snippet),
            "level": extract_level(hit.snippet),
        }


class BookResolver(WebSearchResolver):
    kind = SourceType.BOOK
    query_suffix = "book"
    sites = ("amazon.com", "books.google.com")
    limit = 5
    source_prior = 0.7
    label = "Books"

    def origin(self, hit: WebHit) -> str:
        return extract_author(hit.snippet) or "Unknown"

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {
            **_priced(hit.snippet, "$20-40"),
            "author": extract_author(hit.snippet),
            "format": extract_format(hit.snippet),
        }


class CertificationResolver(WebSearchResolver):
    kind = SourceType.CERTIFICATION
    query_suffix = "certification professional"
    limit = 3
    source_prior = 0.75
    label = "Certifications"

    def origin(self, hit: WebHit) -> str:
        return extract_provider(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {
            **_priced(hit.snippet, "Varies"),
            "hours": extract_hours(hit.snippet),
            "prerequisites": extract_prerequisites(hit.snippet),
        }


class GovernmentResolver(WebSearchResolver):
    kind = SourceType.GOVERNMENT
    query_suffix = "government guide official"
    sites = (".gov", ".edu")
    limit = 5
    source_prior = 0.9
    label = "Government"

    def origin(self, hit: WebHit) -> str:
        return extract_agency(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {"cost_label": "Free", "cost": None, "agency": extract_agency(hit.url)}


class ArticleResolver(WebSearchResolver):
    kind = SourceType.ARTICLE
    query_suffix = "tutorial guide article"
    limit = 10
    source_prior = 0.6
    label = "Articles"

    def accept(self, hit: WebHit) -> bool:
        return is_quality_source(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {"cost_label": "Free", "cost": None, "author": extract_author(hit.snippet)}


class PodcastResolver(WebSearchResolver):
    kind = SourceType.PODCAST
    query_suffix = "podcast"
    sites = ("spotify.com", "podcasts.apple.com")
    limit = 5
    source_prior = 0.5
    label = "Podcasts"

    def origin(self, hit: WebHit) -> str:
        return extract_host(hit.snippet) or extract_domain(hit.url)

    def extract(self, hit: WebHit) -> Dict[str, Any]:
        return {"cost_label": "Free", "cost": None, "host": extract_host(hit.snippet)}


WEB_RESOLVER_CLASSES: Sequence[type] = (
    AcademicCourseResolver,
    BookResolver,
    CertificationResolver,
    GovernmentResolver,
    ArticleResolver,
    PodcastResolver,
)


def build_web_resolvers(settings: Settings, scorer: RelevanceScorer) -> List[WebSearchResolver]:
    return [resolver_cls(settings, scorer) for resolver_cls in WEB_RESOLVER_CLASSES]
