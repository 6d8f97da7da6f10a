"""
Video Resolution Chain
Ordered fallback tiers for video search; the first tier with results wins
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from config.settings import Settings
from intelligence.classification import (
    ClassificationRequest,
    ClassificationService,
    VideoBatchJudgment,
)
from models import Candidate, LearningRequest, Level, SourceResult, SourceType
from scoring.relevance import NON_EDUCATIONAL_MARKERS, RelevanceScorer, boost, contains_any
from scrapers.youtube_scraper import YouTubeScraper
from sources.connectors import fetch_video_feed
from utils.exceptions import SourceExhausted, SourceUnavailable

from .base import SourceResolver, TierOutcome, VideoQuery, VideoTier


logger = logging.getLogger(__name__)

LEVEL_MODIFIERS: Dict[Level, str] = {
    Level.BEGINNER: "tutorial introduction explained",
    Level.INTERMEDIATE: "guide course",
    Level.ADVANCED: "advanced deep dive masterclass",
}

Sleep = Callable[[float], Awaitable[None]]

CHAIN_BUDGET_MARGIN_SEC = 1.0
FEED_TIMEOUT_SEC = 12.0
# share of the tier budget the hybrid tier may spend; the rest covers local scoring
HYBRID_DEADLINE_SHARE = 0.9
# share of the tier budget available for feed gathering before judgment
HYBRID_GATHER_SHARE = 0.5


def drop_non_educational(candidates: Iterable[Candidate]) -> List[Candidate]:
    return [
        c for c in candidates
        if not contains_any(c.title, NON_EDUCATIONAL_MARKERS)
        and not contains_any(c.description, NON_EDUCATIONAL_MARKERS)
    ]


def apply_preferred_boost(
    candidates: Iterable[Candidate],
    preferred: FrozenSet[str],
    amount: float,
) -> List[Candidate]:
    boosted = [boost(c, amount, preferred) for c in candidates]
    boosted.sort(key=lambda c: c.score, reverse=True)
    return boosted


class HybridTier(VideoTier):
    """Feed search with several phrasings, judged in one batch by the classification service"""

    name = "hybrid"

    def __init__(
        self,
        settings: Settings,
        classifier: ClassificationService,
        scorer: RelevanceScorer,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self.classifier = classifier
        self.scorer = scorer
        self._sleep = sleep
        self.budget_sec = settings.video.tier_timeout_sec

    @staticmethod
    def phrasings(topic: str) -> List[str]:
        return [f"{topic} tutorial", f"{topic} course", f"{topic} explained", f"learn {topic}"]

    @staticmethod
    def _now() -> float:
        return asyncio.get_running_loop().time()

    async def _gather(self, query: VideoQuery, deadline: float) -> List[Candidate]:
        cap = query.max_results * 2
        seen = set()
        collected: List[Candidate] = []
        for index, phrasing in enumerate(self.phrasings(query.topic)):
            if index:
                await self._sleep(self.settings.feed.query_delay_sec)
            remaining = deadline - self._now()
            if remaining <= 0:
                logger.info(f"[Video:{self.name}] gather budget spent after {index} phrasings")
                break
            try:
                results = await asyncio.wait_for(
                    fetch_video_feed(phrasing, self.settings.feed, timeout=min(FEED_TIMEOUT_SEC, remaining)),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                logger.warning(f"[Video:{self.name}] '{phrasing}' timed out")
                break
            except SourceUnavailable as e:
                logger.warning(f"[Video:{self.name}] '{phrasing}' skipped: {e.message}")
                continue
            for candidate in results:
                if candidate.key in seen:
                    continue
                seen.add(candidate.key)
                collected.append(candidate)
            if len(collected) >= cap:
                break
        return collected[:cap]

    def _prompt(self, query: VideoQuery, videos: Sequence[Candidate]) -> str:
        listing = "\n\n".join(
            f'{i}. "{v.title}" by {v.origin}\n   Description: {v.description[:200]}'
            for i, v in enumerate(videos, start=1)
        )
        return (
            f'Analyze these videos for the specific topic "{query.topic}" at {query.level.value} level.\n'
            f"Be strict about topic specificity: general videos on a broader field do not count.\n\n"
            f"For each video give relevance (0-1) to the exact topic, educational value (0-1) "
            f"and level appropriateness (0-1).\n\n"
            f"Videos:\n{listing}\n\n"
            f'Respond as JSON: {{"videos": [{{"index": 1, "relevance": 0.9, "educational": 0.95, '
            f'"levelMatch": 0.8, "reason": "brief reason"}}]}}\n'
            f"Omit music videos, vlogs, pranks and entertainment."
        )

    async def _judge(self, query: VideoQuery, videos: List[Candidate], deadline: float) -> Optional[List[Candidate]]:
        remaining = deadline - self._now()
        if remaining <= 0:
            return None
        try:
            result = await asyncio.wait_for(
                self.classifier.classify(
                    ClassificationRequest(task="video_relevance", prompt=self._prompt(query, videos)),
                    response_model=VideoBatchJudgment,
                    default=None,
                ),
                timeout=remaining,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[Video:{self.name}] judgment exceeded the tier budget ({remaining:.1f}s left)")
            return None
        if not result.ok or result.value is None:
            return None

        min_score = self.settings.video.ai_min_score
        judged: List[Candidate] = []
        for judgment in result.value.videos:
            if not 1 <= judgment.index <= len(videos):
                continue
            combined = round(
                judgment.relevance * 0.4 + judgment.educational * 0.4 + judgment.level_match * 0.2, 4
            )
            if combined < min_score:
                continue
            judged.append(
                videos[judgment.index - 1].with_score(
                    combined,
                    ai_reason=judgment.reason,
                    ai_scores={
                        "relevance": judgment.relevance,
                        "educational": judgment.educational,
                        "level_match": judgment.level_match,
                    },
                )
            )
        logger.info(f"[Video:{self.name}] AI kept {len(judged)} of {len(videos)} videos")
        return judged

    def _score_locally(self, query: VideoQuery, videos: List[Candidate]) -> List[Candidate]:
        min_score = self.settings.video.local_min_score
        ranked = self.scorer.rank(videos, query.topic, query.level)
        return [c for c in ranked if c.score >= min_score]

    async def _resolve(self, query: VideoQuery) -> List[Candidate]:
        started = self._now()
        gather_deadline = started + self.budget_sec * HYBRID_GATHER_SHARE
        deadline = started + self.budget_sec * HYBRID_DEADLINE_SHARE

        videos = drop_non_educational(await self._gather(query, gather_deadline))
        if not videos:
            return []

        scored = await self._judge(query, videos, deadline)
        if scored is None:
            logger.warning(f"[Video:{self.name}] classification unavailable, using local scoring")
            scored = self._score_locally(query, videos)

        scored = [c.with_score(c.score, resolved_by=self.name) for c in scored]
        boosted = apply_preferred_boost(scored, query.preferred_sources, self.settings.video.preferred_boost)
        return boosted[: query.max_results]


class PrimaryApiTier(VideoTier):
    """Credentialed search with a level-biased query, scored locally"""

    name = "api"

    def __init__(self, settings: Settings, scraper: YouTubeScraper, scorer: RelevanceScorer):
        self.settings = settings
        self.scraper = scraper
        self.scorer = scorer

    @staticmethod
    def build_query(topic: str, level: Level) -> str:
        return f"{topic} {LEVEL_MODIFIERS[level]} educational"

    async def _resolve(self, query: VideoQuery) -> List[Candidate]:
        if not self.scraper.is_configured():
            raise SourceUnavailable("YouTube API key not configured", source="video")

        videos = await self.scraper.search(
            self.build_query(query.topic, query.level),
            max_results=query.max_results,
        )
        ranked = self.scorer.rank(videos, query.topic, query.level)
        boosted = apply_preferred_boost(ranked, query.preferred_sources, self.settings.video.preferred_boost)
        return boosted[: query.max_results]


class FeedFallbackTier(VideoTier):
    """Single unauthenticated feed query with a flat provisional score"""

    name = "feed_fallback"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def _resolve(self, query: VideoQuery) -> List[Candidate]:
        videos = drop_non_educational(await fetch_video_feed(f"{query.topic} tutorial", self.settings.feed))
        provisional = self.settings.feed.provisional_score
        return [
            c.with_score(provisional, resolved_by=self.name, provisional=True)
            for c in videos[: query.max_results]
        ]


class CuratedFallbackTier(VideoTier):
    """Terminal tier; no curated catalogue is bundled, so it reports an explicit empty result"""

    name = "curated"

    async def _resolve(self, query: VideoQuery) -> List[Candidate]:
        return []

    async def try_resolve(self, query: VideoQuery) -> TierOutcome:
        logger.warning(f"[Video:{self.name}] all search tiers failed for '{query.topic}'; no curated videos available")
        return TierOutcome.failure("no curated catalogue")


class VideoResolutionChain:
    """
    Iterate tiers in order and return the first non-empty result.

    Tiers run strictly sequentially, each bounded by ``tier_timeout_sec``.
    Results are never merged across tiers.
    """

    def __init__(self, tiers: Sequence[VideoTier], tier_timeout_sec: float = 45.0):
        if not tiers:
            raise ValueError("at least one video tier is required")
        self.tiers = list(tiers)
        self.tier_timeout_sec = tier_timeout_sec

    @property
    def time_budget_sec(self) -> float:
        """Worst case for a full pass: every tier used up to its timeout"""
        return len(self.tiers) * self.tier_timeout_sec + CHAIN_BUDGET_MARGIN_SEC

    async def _attempt(self, tier: VideoTier, query: VideoQuery) -> TierOutcome:
        try:
            return await asyncio.wait_for(tier.try_resolve(query), timeout=self.tier_timeout_sec)
        except asyncio.TimeoutError:
            logger.warning(f"[Video:{tier.name}] timed out after {self.tier_timeout_sec}s")
            return TierOutcome.failure("timeout")

    async def resolve(
        self,
        topic: str,
        level: Level,
        preferred_sources: FrozenSet[str] = frozenset(),
        *,
        description: str = "",
        max_results: int = 15,
    ) -> List[Candidate]:
        query = VideoQuery(
            topic=topic,
            level=level,
            preferred_sources=frozenset(preferred_sources),
            description=description,
            max_results=max_results,
        )
        tried: List[str] = []
        for tier in self.tiers:
            tried.append(tier.name)
            outcome = await self._attempt(tier, query)
            if outcome.ok:
                return outcome.candidates

        raise SourceExhausted(f"no video tier produced results for '{topic}'", tiers_tried=tried)


class VideoResolver(SourceResolver):
    """Source resolver backed by the video resolution chain"""

    def __init__(self, chain: VideoResolutionChain, max_results: int = 15, scraper: Optional[YouTubeScraper] = None):
        self.chain = chain
        self.max_results = max_results
        self._scraper = scraper

    @property
    def source_type(self) -> SourceType:
        return SourceType.VIDEO

    @property
    def time_budget_sec(self) -> float:
        return self.chain.time_budget_sec

    async def resolve(self, request: LearningRequest) -> SourceResult:
        candidates = await self.chain.resolve(
            request.topic,
            request.level,
            request.preferred_sources,
            description=request.description,
            max_results=self.max_results,
        )
        return SourceResult(source_type=SourceType.VIDEO, candidates=candidates)

    async def close(self) -> None:
        if self._scraper is not None:
            await self._scraper.close()


def build_video_chain(
    settings: Settings,
    classifier: ClassificationService,
    scorer: RelevanceScorer,
    scraper: YouTubeScraper,
) -> VideoResolutionChain:
    """Default tier order: hybrid, primary API, feed fallback, curated."""
    return VideoResolutionChain(
        [
            HybridTier(settings, classifier, scorer),
            PrimaryApiTier(settings, scraper, scorer),
            FeedFallbackTier(settings),
            CuratedFallbackTier(),
        ],
        tier_timeout_sec=settings.video.tier_timeout_sec,
    )
