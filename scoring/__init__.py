"""
Scoring Module
Relevance scoring and educational filtering
"""
from .relevance import (
    BROAD_EDUCATIONAL_MARKERS,
    EDUCATIONAL_MARKERS,
    NON_EDUCATIONAL_MARKERS,
    RelevanceResult,
    RelevanceScorer,
    boost,
    contains_any,
    term_coverage,
    topic_terms,
)

__all__ = [
    "BROAD_EDUCATIONAL_MARKERS",
    "EDUCATIONAL_MARKERS",
    "NON_EDUCATIONAL_MARKERS",
    "RelevanceResult",
    "RelevanceScorer",
    "boost",
    "contains_any",
    "term_coverage",
    "topic_terms",
]
