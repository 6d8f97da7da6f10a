"""
Safety Module
Content policy tables, classifiers and the screening pipeline
"""
from .classifier import Classifier, KeywordClassifier, KeywordMatch
from .pipeline import SafetyScreeningPipeline
from .policy import (
    AGE_RESTRICTIONS,
    CONTENT_POLICY,
    DISCLAIMER_CATEGORIES,
    LEGAL_ALTERNATIVES,
    PROHIBITED_CONTENT,
    PROHIBITED_PHRASINGS,
    generate_disclaimer,
)

__all__ = [
    "Classifier",
    "KeywordClassifier",
    "KeywordMatch",
    "SafetyScreeningPipeline",
    "AGE_RESTRICTIONS",
    "CONTENT_POLICY",
    "DISCLAIMER_CATEGORIES",
    "LEGAL_ALTERNATIVES",
    "PROHIBITED_CONTENT",
    "PROHIBITED_PHRASINGS",
    "generate_disclaimer",
]
