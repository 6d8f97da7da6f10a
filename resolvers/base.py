"""
Resolver Base
Contracts for source resolvers and video tiers
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional
import logging

from models import Candidate, LearningRequest, Level, SourceResult, SourceType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoQuery:
    """Everything a video tier needs to know about the request"""
    topic: str
    level: Level
    preferred_sources: FrozenSet[str] = frozenset()
    description: str = ""
    max_results: int = 15


@dataclass
class TierOutcome:
    """Result of one tier attempt; ``ok`` means the chain can stop here"""
    candidates: List[Candidate] = field(default_factory=list)
    ok: bool = False
    error: Optional[str] = None

    @classmethod
    def success(cls, candidates: List[Candidate]) -> "TierOutcome":
        return cls(candidates=list(candidates), ok=bool(candidates))

    @classmethod
    def failure(cls, error: str) -> "TierOutcome":
        return cls(candidates=[], ok=False, error=error)


class VideoTier(ABC):
    """
    One strategy in the video resolution chain.

    Subclasses implement ``_resolve``; ``try_resolve`` turns any exception
    into a failed outcome so the chain can move on to the next tier.
    """

    name: str = "tier"

    @abstractmethod
    async def _resolve(self, query: VideoQuery) -> List[Candidate]:
        """Return candidates for the query, possibly empty"""

    async def try_resolve(self, query: VideoQuery) -> TierOutcome:
        try:
            candidates = await self._resolve(query)
        except Exception as e:
            logger.warning(f"[Video:{self.name}] failed: {e}")
            return TierOutcome.failure(str(e))

        if not candidates:
            logger.info(f"[Video:{self.name}] no results for '{query.topic}'")
            return TierOutcome.failure("no results")
        logger.info(f"[Video:{self.name}] resolved {len(candidates)} videos for '{query.topic}'")
        return TierOutcome.success(candidates)


class SourceResolver(ABC):
    """Fetches candidates of one source type for a learning request"""

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Source type produced"""

    @property
    def name(self) -> str:
        return self.source_type.value

    @property
    def time_budget_sec(self) -> Optional[float]:
        """Time this resolver needs to finish; None defers to the orchestrator's per-source timeout"""
        return None

    @abstractmethod
    async def resolve(self, request: LearningRequest) -> SourceResult:
        """
        Resolve candidates for the request.

        Raises:
            SourceUnavailable: the upstream could not be queried
        """

    async def close(self) -> None:
        return None
