"""End-to-end service flow with a fake orchestrator; no network."""

from __future__ import annotations

from typing import List

import pytest

from aggregator import LearningPathArchitect, assemble_knowledge_path, fallback_structure
from config.settings import LLMSettings, Settings
from intelligence.classification import ClassificationService
from models import (
    Candidate,
    LearningRequest,
    OutcomeStatus,
    ResearchResult,
    SourceResult,
    SourceType,
)
from orchestrator import LearningPathService, build_default_service
from resolvers import VideoResolver
from safety import SafetyScreeningPipeline
from utils.exceptions import RequestBlocked, SourceExhausted
from verification import QualityVerificationGate


GOOD_TITLES = [
    "Topic introduction",
    "Topic basics",
    "Core ideas",
    "Worked examples",
    "Common mistakes",
    "Advanced topic review",
]


class _FakeOrchestrator:
    def __init__(self, titles: List[str] = GOOD_TITLES, source_errors=None):
        self.titles = titles
        self.source_errors = source_errors or {}
        self.calls = 0
        self.closed = False

    async def research(self, request: LearningRequest) -> ResearchResult:
        self.calls += 1
        videos = [
            Candidate(
                source_type=SourceType.VIDEO,
                title=title,
                origin=f"Channel {i}",
                url=f"https://www.youtube.com/watch?v={i}",
                raw_signals={"description": title, "view_count": 20_000},
            )
            for i, title in enumerate(self.titles)
        ]
        return ResearchResult(
            request=request,
            sources={SourceType.VIDEO: SourceResult(source_type=SourceType.VIDEO, candidates=videos)},
            source_errors=self.source_errors,
        )

    async def close(self) -> None:
        self.closed = True


def _service(orchestrator: _FakeOrchestrator) -> LearningPathService:
    classifier = ClassificationService(None)
    return LearningPathService(
        safety=SafetyScreeningPipeline(classifier),
        orchestrator=orchestrator,
        gate=QualityVerificationGate(classifier),
        classifier=classifier,
    )


@pytest.mark.asyncio
async def test_blocked_request_never_reaches_research() -> None:
    orchestrator = _FakeOrchestrator()

    outcome = await _service(orchestrator).run(LearningRequest(topic="how to manufacture illegal drugs"))

    assert outcome.status == OutcomeStatus.BLOCKED
    assert outcome.safety.category == "illegal_activities"
    assert outcome.research is None
    assert orchestrator.calls == 0
    with pytest.raises(RequestBlocked) as excinfo:
        outcome.raise_for_status()
    assert excinfo.value.decision.reason == "prohibited_content"


@pytest.mark.asyncio
async def test_allowed_request_is_researched_and_verified() -> None:
    orchestrator = _FakeOrchestrator()

    outcome = await _service(orchestrator).run(LearningRequest(topic="graph theory"))

    assert orchestrator.calls == 1
    assert outcome.status == OutcomeStatus.READY
    assert outcome.verification.ready is True
    assert outcome.disclaimer is None
    outcome.raise_for_status()


@pytest.mark.asyncio
async def test_disclaimer_document_is_attached() -> None:
    outcome = await _service(_FakeOrchestrator()).run(LearningRequest(topic="medication interactions"))

    assert outcome.disclaimer["type"] == "medical"
    assert outcome.disclaimer["requires_acceptance"] is True


@pytest.mark.asyncio
async def test_unknown_age_gets_age_restricted_document() -> None:
    outcome = await _service(_FakeOrchestrator()).run(LearningRequest(topic="poker strategy"))

    assert outcome.safety.requires_age_verification is True
    assert outcome.disclaimer["type"] == "age_restricted"


@pytest.mark.asyncio
async def test_weak_result_needs_refinement_and_reports_exhausted_video() -> None:
    orchestrator = _FakeOrchestrator(titles=[], source_errors={"video": "no video tier produced results"})

    outcome = await _service(orchestrator).run(LearningRequest(topic="graph theory"))

    assert outcome.status == OutcomeStatus.NEEDS_REFINEMENT
    with pytest.raises(SourceExhausted):
        outcome.raise_for_status()


@pytest.mark.asyncio
async def test_aclose_closes_orchestrator() -> None:
    orchestrator = _FakeOrchestrator()
    await _service(orchestrator).aclose()
    assert orchestrator.closed is True


@pytest.mark.asyncio
async def test_build_default_service_wires_all_sources() -> None:
    settings = Settings(llm=LLMSettings(openai_api_key=None, anthropic_api_key=None, deepseek_api_key=None))

    service = build_default_service(settings)

    resolvers = service.orchestrator.resolvers
    assert {r.source_type for r in resolvers} == set(SourceType)
    assert isinstance(resolvers[0], VideoResolver)
    assert [tier.name for tier in resolvers[0].chain.tiers] == ["hybrid", "api", "feed_fallback", "curated"]
    assert service.gate.classifier.available is False
    await service.aclose()


@pytest.mark.asyncio
async def test_age_verification_outranks_category_disclaimer() -> None:
    request = LearningRequest(topic="wine and nutrition")

    unknown_age = await _service(_FakeOrchestrator()).run(request)
    adult = await _service(_FakeOrchestrator()).run(request, user_age=30)

    assert unknown_age.safety.disclaimer_type == "medical"
    assert unknown_age.disclaimer["type"] == "age_restricted"
    assert adult.disclaimer["type"] == "medical"


class _FixedArchitect:
    def __init__(self):
        self.requests = []

    async def build(self, request: LearningRequest):
        self.requests.append(request)
        structure = fallback_structure(request.topic, request.level)
        return assemble_knowledge_path(structure, {})


@pytest.mark.asyncio
async def test_staged_path_is_attached_only_when_requested() -> None:
    architect = _FixedArchitect()
    classifier = ClassificationService(None)
    service = LearningPathService(
        safety=SafetyScreeningPipeline(classifier),
        orchestrator=_FakeOrchestrator(),
        gate=QualityVerificationGate(classifier),
        classifier=classifier,
        architect=architect,
    )
    request = LearningRequest(topic="graph theory")

    plain = await service.run(request)
    staged = await service.run(request, design_stages=True)
    blocked = await service.run(LearningRequest(topic="how to manufacture illegal drugs"), design_stages=True)

    assert plain.path is None
    assert [stage.title for stage in staged.path.structure.stages][0] == "Fundamentals"
    assert staged.path.completeness.total_stages == 4
    assert blocked.path is None
    assert architect.requests == [request]


@pytest.mark.asyncio
async def test_build_default_service_wires_stage_search_to_the_video_chain() -> None:
    settings = Settings(llm=LLMSettings(openai_api_key=None, anthropic_api_key=None, deepseek_api_key=None))

    service = build_default_service(settings)

    assert isinstance(service.architect, LearningPathArchitect)
    assert service.architect.max_results_per_stage == settings.research.stage_max_results
    await service.aclose()
