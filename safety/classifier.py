"""
Request Classifiers
Keyword matching behind a small interface so a statistical model can replace it
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence


@dataclass(frozen=True)
class KeywordMatch:
    category: str
    keyword: str
    matched_text: str


class Classifier(ABC):
    """Maps request text to the first matching policy category, if any"""

    @abstractmethod
    def match(self, text: str) -> Optional[KeywordMatch]:
        """Return the first match or None"""


class KeywordClassifier(Classifier):
    """
    Lower-case substring matching over ``{category: keywords}``.

    Categories and keywords are checked in table order. ``variants`` maps
    ``{category: {phrasing: keyword}}``; variants are checked only after
    the primary table and report the keyword they restate.
    """

    def __init__(
        self,
        table: Mapping[str, Sequence[str]],
        variants: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        self.table: Dict[str, tuple] = {category: tuple(keywords) for category, keywords in table.items()}
        self.variants: Dict[str, Dict[str, str]] = {
            category: dict(phrasings) for category, phrasings in (variants or {}).items()
        }

    def match(self, text: str) -> Optional[KeywordMatch]:
        lowered = str(text or "").lower()
        for category, keywords in self.table.items():
            for keyword in keywords:
                if keyword in lowered:
                    return KeywordMatch(category=category, keyword=keyword, matched_text=keyword)
        for category, phrasings in self.variants.items():
            for phrasing, keyword in phrasings.items():
                if phrasing in lowered:
                    return KeywordMatch(category=category, keyword=keyword, matched_text=phrasing)
        return None
