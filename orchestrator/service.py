"""Learning path service: safety screening, research and verification for one request."""

from __future__ import annotations

import logging
from typing import List, Optional

from aggregator import LearningPathArchitect, MultiSourceOrchestrator
from config.settings import Settings
from intelligence import ClassificationService, get_llm
from models import Candidate, LearningPathOutcome, LearningRequest, Level, OutcomeStatus, SafetyDecision
from resolvers import VideoResolutionChain, VideoResolver, build_video_chain, build_web_resolvers
from safety import SafetyScreeningPipeline, generate_disclaimer
from scoring import RelevanceScorer
from scrapers import YouTubeScraper
from verification import QualityVerificationGate, ResourceVerifier


logger = logging.getLogger(__name__)


def _disclaimer_type(decision: SafetyDecision) -> Optional[str]:
    """Age verification outranks any category disclaimer."""
    if decision.requires_age_verification:
        return "age_restricted"
    return decision.disclaimer_type


class LearningPathService:
    """Runs screen -> research -> verify for a learning request."""

    def __init__(
        self,
        safety: SafetyScreeningPipeline,
        orchestrator: MultiSourceOrchestrator,
        gate: QualityVerificationGate,
        classifier: Optional[ClassificationService] = None,
        architect: Optional[LearningPathArchitect] = None,
    ) -> None:
        self.safety = safety
        self.orchestrator = orchestrator
        self.gate = gate
        self.architect = architect
        self._classifier = classifier

    async def screen(self, request: LearningRequest, user_age: Optional[int] = None) -> SafetyDecision:
        return await self.safety.screen(request, user_age=user_age)

    async def run(
        self,
        request: LearningRequest,
        user_age: Optional[int] = None,
        design_stages: bool = False,
    ) -> LearningPathOutcome:
        decision = await self.screen(request, user_age=user_age)
        if not decision.allowed:
            logger.info(f"[Service] '{request.topic}' blocked: {decision.reason}")
            return LearningPathOutcome(request=request, safety=decision, status=OutcomeStatus.BLOCKED)

        research = await self.orchestrator.research(request)
        report = await self.gate.verify(research, request)

        disclaimer = None
        disclaimer_type = _disclaimer_type(decision)
        if disclaimer_type:
            disclaimer = generate_disclaimer(disclaimer_type, request.topic)

        path = None
        if design_stages and self.architect is not None:
            path = await self.architect.build(request)

        status = OutcomeStatus.READY if report.ready else OutcomeStatus.NEEDS_REFINEMENT
        logger.info(f"[Service] '{request.topic}' finished: {status.value} ({report.status.value})")
        return LearningPathOutcome(
            request=request,
            safety=decision,
            research=research,
            verification=report,
            disclaimer=disclaimer,
            path=path,
            status=status,
        )

    async def aclose(self) -> None:
        await self.orchestrator.close()
        if self._classifier is not None:
            await self._classifier.aclose()


def chain_stage_search(chain: VideoResolutionChain):
    """Stage search backed by the video resolution chain"""

    async def _search(query: str, level: Level, max_results: int) -> List[Candidate]:
        return await chain.resolve(query, level, max_results=max_results)

    return _search


def build_default_service(settings: Settings) -> LearningPathService:
    """Wire the concrete resolvers, LLM and classifiers from settings."""
    llm = get_llm(settings.llm, timeout=settings.classification.timeout_sec)
    classifier = ClassificationService(llm, settings.classification)
    scorer = RelevanceScorer()
    scraper = YouTubeScraper(settings)

    chain = build_video_chain(settings, classifier, scorer, scraper)
    resolvers = [
        VideoResolver(chain, max_results=settings.video.max_results, scraper=scraper),
        *build_web_resolvers(settings, scorer),
    ]
    orchestrator = MultiSourceOrchestrator(
        resolvers,
        settings.research,
        verifier=ResourceVerifier(settings.verification, timeout=settings.general.request_timeout),
    )
    return LearningPathService(
        safety=SafetyScreeningPipeline(classifier),
        orchestrator=orchestrator,
        gate=QualityVerificationGate(classifier, settings.verification),
        classifier=classifier,
        architect=LearningPathArchitect(
            classifier,
            chain_stage_search(chain),
            max_results_per_stage=settings.research.stage_max_results,
        ),
    )
