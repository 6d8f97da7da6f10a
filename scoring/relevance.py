"""Deterministic relevance scoring and educational filtering for candidates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from models import Candidate, Level


EDUCATIONAL_MARKERS: Tuple[str, ...] = (
    "tutorial",
    "guide",
    "explained",
    "course",
    "learn",
    "introduction",
)

# wider net used only by the educational filter
BROAD_EDUCATIONAL_MARKERS: Tuple[str, ...] = EDUCATIONAL_MARKERS + (
    "lesson",
    "how to",
    "understanding",
    "basics",
    "fundamentals",
    "complete guide",
    "crash course",
    "masterclass",
    "lecture",
)

NON_EDUCATIONAL_MARKERS: Tuple[str, ...] = (
    "music video",
    "vlog",
    "prank",
    "compilation",
    "meme",
    "shorts",
    "challenge",
    "gameplay",
    "reaction",
    "unboxing",
)

EDUCATION_CATEGORY_ID = "27"

_BASE_SCORE = 0.3
_MIN_DURATION_MINUTES = 2
_MAX_DURATION_MINUTES = 120


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def topic_terms(topic: str) -> List[str]:
    """Lower-cased topic words longer than three characters, all words if none are."""
    words = re.findall(r"[a-z0-9]+", str(topic or "").lower())
    long_words = [word for word in words if len(word) > 3]
    return long_words or words


def term_coverage(text: str, terms: Sequence[str]) -> float:
    if not terms:
        return 0.0
    lowered = str(text or "").lower()
    return sum(1 for term in terms if term in lowered) / len(terms)


def contains_any(text: str, markers: Iterable[str]) -> bool:
    lowered = str(text or "").lower()
    return any(marker in lowered for marker in markers)


@dataclass(frozen=True)
class RelevanceResult:
    score: float
    is_educational: bool
    reasons: Tuple[str, ...] = ()


class RelevanceScorer:
    """
    Explainable additive scorer.

    Pure with respect to its inputs: the recency reference clock is fixed at
    construction, so scoring the same candidate twice yields the same result.
    """

    def __init__(self, now: Optional[datetime] = None, recency_months: int = 24):
        self.now = _as_utc(now or datetime.now(timezone.utc))
        self.recency_window = timedelta(days=round(recency_months * 30.44))

    def score(self, candidate: Candidate, topic: str, level: Union[Level, str]) -> RelevanceResult:
        level_word = level.value if isinstance(level, Level) else str(level or "").lower()
        title = candidate.title.lower()
        description = candidate.description.lower()
        phrase = str(topic or "").strip().lower()
        terms = topic_terms(topic)

        score = _BASE_SCORE
        reasons: List[str] = [f"base:+{_BASE_SCORE:.2f}"]

        def add(label: str, delta: float) -> None:
            nonlocal score
            score += delta
            reasons.append(f"{label}:{delta:+.2f}")

        title_cov = term_coverage(title, terms)
        if phrase and phrase in title:
            add("title.exact_phrase", 0.4)
        elif title_cov >= 0.7:
            add("title.term_coverage", 0.25)
        elif title_cov > 0:
            add("title.partial_terms", 0.1)
        else:
            add("title.no_match", -0.3)

        if contains_any(title, EDUCATIONAL_MARKERS):
            add("title.educational_marker", 0.1)
        if level_word and level_word in title:
            add("title.level", 0.1)

        description_cov = term_coverage(description, terms)
        if phrase and phrase in description:
            add("description.exact_phrase", 0.15)
        elif description_cov >= 0.5:
            add("description.term_coverage", 0.08)

        views = candidate.view_count
        if views is not None:
            if views > 100_000:
                add("engagement.views_100k", 0.05)
            if views > 500_000:
                add("engagement.views_500k", 0.05)
            likes = candidate.like_count
            if likes is not None and views > 0 and likes / views > 0.02:
                add("engagement.like_ratio", 0.05)

        published = candidate.published_at
        if published is not None and self.now - _as_utc(published) <= self.recency_window:
            add("recency.recent", 0.05)

        category_id = str(candidate.raw_signals.get("category_id") or "")
        category = str(candidate.raw_signals.get("category") or "").lower()
        if category_id == EDUCATION_CATEGORY_ID or category == "education":
            add("category.education", 0.1)

        educational = self._is_educational(candidate, phrase, terms)
        return RelevanceResult(
            score=round(_clamp01(score), 4),
            is_educational=educational,
            reasons=tuple(reasons),
        )

    def _is_educational(self, candidate: Candidate, phrase: str, terms: Sequence[str]) -> bool:
        title = candidate.title.lower()
        description = candidate.description.lower()

        if contains_any(title, NON_EDUCATIONAL_MARKERS) or contains_any(description, NON_EDUCATIONAL_MARKERS):
            return False

        has_marker = contains_any(title, BROAD_EDUCATIONAL_MARKERS) or contains_any(
            description, BROAD_EDUCATIONAL_MARKERS
        )

        duration = candidate.duration_minutes
        if duration is not None and not has_marker:
            if duration < _MIN_DURATION_MINUTES or duration > _MAX_DURATION_MINUTES:
                return False

        topic_match = bool(
            (phrase and phrase in title)
            or any(term in title for term in terms)
            or (phrase and phrase in description)
            or term_coverage(description, terms) >= 0.5
        )
        return has_marker or topic_match

    def rank(
        self,
        candidates: Iterable[Candidate],
        topic: str,
        level: Union[Level, str],
    ) -> List[Candidate]:
        """Score every candidate, drop the non-educational, sort by score descending."""
        ranked: List[Candidate] = []
        for candidate in candidates:
            result = self.score(candidate, topic, level)
            if not result.is_educational:
                continue
            ranked.append(candidate.with_score(result.score, relevance_reasons=list(result.reasons)))
        ranked.sort(key=lambda c: c.score, reverse=True)
        return ranked


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def boost(candidate: Candidate, amount: float, preferred: Iterable[str]) -> Candidate:
    """Add ``amount`` (clamped) when the candidate's origin is a preferred source."""
    preferred_lower = {str(name).strip().lower() for name in preferred if str(name).strip()}
    if not preferred_lower:
        return candidate
    origin = candidate.origin.strip().lower()
    if origin and any(name in origin for name in preferred_lower):
        return candidate.with_score(_clamp01(candidate.score + amount), preferred_source=True)
    return candidate
