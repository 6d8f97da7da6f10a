"""Resource availability checks and per-source-type quality assessment."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from config.settings import VerificationSettings
from models import Candidate, SourceResult, SourceType
from sources import connectors
from sources.extraction import parse_cost


logger = logging.getLogger(__name__)

# credibility, relevance, currency, accessibility
_WEIGHTS: Dict[SourceType, tuple] = {
    SourceType.COURSE: (0.4, 0.3, 0.2, 0.1),
    SourceType.GOVERNMENT: (0.5, 0.2, 0.2, 0.1),
    SourceType.CERTIFICATION: (0.4, 0.3, 0.2, 0.1),
    SourceType.BOOK: (0.3, 0.3, 0.2, 0.2),
    SourceType.VIDEO: (0.2, 0.4, 0.2, 0.2),
    SourceType.ARTICLE: (0.3, 0.3, 0.3, 0.1),
    SourceType.PODCAST: (0.3, 0.3, 0.2, 0.2),
}
_DEFAULT_WEIGHTS = (0.25, 0.25, 0.25, 0.25)

_CURRENCY = {
    SourceType.GOVERNMENT: 0.9,
    SourceType.COURSE: 0.8,
    SourceType.VIDEO: 0.6,
    SourceType.BOOK: 0.7,
}

EDUCATIONAL_CHANNELS = ("khan academy", "3blue1brown", "crash course", "ted-ed")

# free by nature when no price was extracted
_FREE_BY_DEFAULT = {SourceType.VIDEO, SourceType.PODCAST, SourceType.GOVERNMENT}


def assess_credibility(candidate: Candidate) -> float:
    url = candidate.url.lower()
    if ".gov" in url or ".edu" in url:
        return 1.0
    if any(marker in url for marker in ("coursera", "edx", "udacity", "mit.edu")):
        return 0.9
    if "amazon" in url or "springer" in url:
        return 0.8
    if "youtube.com" in url and candidate.origin:
        origin = candidate.origin.lower()
        if any(channel in origin for channel in EDUCATIONAL_CHANNELS):
            return 0.8
        return 0.6
    if "medium" in url or "towards" in url:
        return 0.6
    return 0.5


def assess_currency(candidate: Candidate) -> float:
    return _CURRENCY.get(candidate.source_type, 0.7)


def assess_accessibility(candidate: Candidate) -> float:
    label = candidate.raw_signals.get("cost_label")
    if label is None and candidate.source_type in _FREE_BY_DEFAULT:
        label = "Free"
    if label in ("Free", "$0"):
        return 1.0
    amount = parse_cost(label) if isinstance(label, str) and "$" in label else None
    if amount is None:
        return 0.5
    if amount < 50:
        return 0.8
    if amount < 200:
        return 0.6
    if amount < 1000:
        return 0.4
    return 0.2


def assess_quality(candidate: Candidate) -> Dict[str, float]:
    scores = {
        "credibility": assess_credibility(candidate),
        "relevance": candidate.score or 0.5,
        "currency": assess_currency(candidate),
        "accessibility": assess_accessibility(candidate),
    }
    weights = _WEIGHTS.get(candidate.source_type, _DEFAULT_WEIGHTS)
    overall = sum(value * weight for value, weight in zip(scores.values(), weights))
    scores["overall"] = round(overall, 2)
    return scores


def has_valid_scheme(url: str) -> bool:
    parsed = urlparse(str(url or ""))
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ResourceVerifier:
    """
    Verify candidate URLs and attach quality scores.

    Scheme validation always runs; a HEAD request is issued only when
    ``check_urls`` is enabled.
    """

    def __init__(self, settings: Optional[VerificationSettings] = None, timeout: float = 8.0):
        self.settings = settings or VerificationSettings()
        self.timeout = timeout

    async def verify_candidate(self, candidate: Candidate) -> Candidate:
        quality = assess_quality(candidate)
        error: Optional[str] = None

        accessible = has_valid_scheme(candidate.url)
        if not accessible:
            error = "Invalid URL"
        elif self.settings.check_urls:
            accessible = await connectors.check_url(candidate.url, timeout=self.timeout)
            if not accessible:
                error = "URL not reachable"

        return candidate.with_verification(
            accessible,
            quality_score=quality["overall"],
            quality_assessment=quality,
            verification_error=error,
        )

    async def verify_result(self, sources: Mapping[SourceType, SourceResult]) -> Dict[SourceType, SourceResult]:
        verified: Dict[SourceType, SourceResult] = {}
        failed_total = 0
        checked_total = 0
        for source_type, result in sources.items():
            candidates = await asyncio.gather(*(self.verify_candidate(c) for c in result.candidates))
            failed = sum(1 for c in candidates if not c.verified)
            if failed:
                logger.warning(f"[Verify] {failed} {source_type.value} resources could not be verified")
            failed_total += failed
            checked_total += len(candidates)
            verified[source_type] = SourceResult(source_type=source_type, candidates=list(candidates))

        logger.info(f"[Verify] {checked_total - failed_total}/{checked_total} resources verified")
        return verified

    def filter_quality(
        self,
        sources: Mapping[SourceType, SourceResult],
        min_quality: Optional[float] = None,
    ) -> Dict[SourceType, SourceResult]:
        """Keep verified candidates whose quality score meets the threshold."""
        threshold = self.settings.min_resource_quality if min_quality is None else min_quality
        filtered: Dict[SourceType, SourceResult] = {}
        for source_type, result in sources.items():
            kept = [
                c for c in result.candidates
                if c.verified and float(c.raw_signals.get("quality_score", 0.0)) >= threshold
            ]
            removed = len(result.candidates) - len(kept)
            if removed:
                logger.info(f"[Verify] removed {removed} low-quality {source_type.value} resources")
            filtered[source_type] = SourceResult(source_type=source_type, candidates=kept)
        return filtered

    def quality_report(self, sources: Mapping[SourceType, SourceResult]) -> Dict[str, Any]:
        by_type: Dict[str, Dict[str, Any]] = {}
        total = 0
        verified_total = 0
        quality_sum = 0.0

        for source_type, result in sources.items():
            verified = [c for c in result.candidates if c.verified]
            type_quality = sum(float(c.raw_signals.get("quality_score", 0.0)) for c in verified)
            by_type[source_type.value] = {
                "total": len(result.candidates),
                "verified": len(verified),
                "average_quality": round(type_quality / len(verified), 2) if verified else 0.0,
            }
            total += len(result.candidates)
            verified_total += len(verified)
            quality_sum += type_quality

        average = round(quality_sum / verified_total, 2) if verified_total else 0.0
        recommendations = []
        if average < 0.6:
            recommendations.append(
                "Overall content quality is moderate. Consider supplementing with additional high-quality sources."
            )
        if verified_total < total * 0.8:
            recommendations.append(
                "Some resources could not be verified. We recommend focusing on verified sources only."
            )
        if by_type.get(SourceType.COURSE.value, {}).get("verified", 0) == 0:
            recommendations.append(
                "No verified academic courses found. Consider enrolling in a structured course for systematic learning."
            )

        return {
            "total_resources": total,
            "verified_resources": verified_total,
            "average_quality_score": average,
            "by_source_type": by_type,
            "recommendations": recommendations,
        }
