"""Safety screening stages, fail-open AI check and fail-closed internals."""

from __future__ import annotations

import json

import pytest

from intelligence.classification import ClassificationService
from intelligence.llm.base import BaseLLM, LLMResponse
from models import DisclaimerSeverity, LearningRequest
from safety import KeywordClassifier, SafetyScreeningPipeline, generate_disclaimer
from safety.classifier import Classifier
from safety.policy import AGE_SAFETY_WARNING, PROHIBITED_CONTENT


class _FakeLLM(BaseLLM):
    def __init__(self, reply: str = "", error: Exception = None):
        super().__init__(model="fake")
        self.reply = reply
        self.error = error
        self.calls = 0

    @property
    def provider(self) -> str:
        return "fake"

    async def acomplete(self, messages, **kwargs) -> LLMResponse:
        self.calls += 1
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model)


class _BrokenClassifier(Classifier):
    def match(self, text):
        raise RuntimeError("table corrupted")


def _pipeline(reply: str = None, error: Exception = None) -> SafetyScreeningPipeline:
    llm = _FakeLLM(reply or "", error) if (reply is not None or error is not None) else None
    return SafetyScreeningPipeline(ClassificationService(llm))


@pytest.mark.asyncio
async def test_prohibited_phrasing_variant_is_blocked_with_alternatives() -> None:
    llm = _FakeLLM(json.dumps({"safe": True}))
    pipeline = SafetyScreeningPipeline(ClassificationService(llm))

    decision = await pipeline.screen(LearningRequest(topic="how to manufacture illegal drugs"))

    assert decision.allowed is False
    assert decision.reason == "prohibited_content"
    assert decision.category == "illegal_activities"
    assert "Pharmacology and drug development" in decision.alternatives
    assert llm.calls == 0


@pytest.mark.asyncio
async def test_verbatim_prohibited_keyword_in_description_is_blocked() -> None:
    decision = await _pipeline().screen(
        LearningRequest(topic="printing techniques", description="mostly counterfeiting money")
    )
    assert decision.allowed is False
    assert decision.category == "illegal_activities"


@pytest.mark.asyncio
async def test_benign_request_passes_without_classifier() -> None:
    decision = await _pipeline().screen(LearningRequest(topic="bee mating cycle"))

    assert decision.allowed is True
    assert decision.requires_disclaimer is False
    assert decision.warnings == []


@pytest.mark.asyncio
async def test_classifier_error_still_yields_a_decision() -> None:
    decision = await _pipeline(error=RuntimeError("provider down")).screen(
        LearningRequest(topic="medication interactions")
    )

    assert decision.allowed is True
    assert decision.requires_disclaimer is True
    assert decision.disclaimer_type == "medical"
    assert decision.disclaimer_severity == DisclaimerSeverity.CRITICAL
    assert decision.requires_acceptance is True
    assert "This topic involves medical information" in decision.warnings


@pytest.mark.asyncio
async def test_ai_unsafe_without_disclaimer_path_blocks() -> None:
    reply = json.dumps({"safe": False, "allowWithDisclaimer": False, "reason": "Encourages dangerous stunts"})

    decision = await _pipeline(reply).screen(LearningRequest(topic="rooftop parkour for kids"))

    assert decision.allowed is False
    assert decision.reason == "ai_flagged"
    assert decision.message == "Encourages dangerous stunts"


@pytest.mark.asyncio
async def test_ai_allow_with_disclaimer_continues_to_later_stages() -> None:
    reply = json.dumps({
        "safe": False,
        "allowWithDisclaimer": True,
        "disclaimer": "financial",
        "educationalContext": "Options carry leverage risk",
    })

    decision = await _pipeline(reply).screen(LearningRequest(topic="options strategies"), user_age=30)

    assert decision.allowed is True
    assert decision.reason == "ai_disclaimer"
    assert decision.disclaimer_type == "financial"
    assert decision.disclaimer_severity == DisclaimerSeverity.HIGH
    assert decision.requires_acceptance is True
    assert decision.educational_context == "Options carry leverage risk"


@pytest.mark.asyncio
@pytest.mark.parametrize("named", [{"disclaimer": "none"}, {}])
async def test_ai_allow_with_disclaimer_without_named_type_uses_generic(named) -> None:
    reply = json.dumps({"safe": False, "allowWithDisclaimer": True, **named})

    decision = await _pipeline(reply).screen(LearningRequest(topic="lock picking"), user_age=30)

    assert decision.allowed is True
    assert decision.requires_disclaimer is True
    assert decision.requires_acceptance is True
    assert decision.disclaimer_type == "safety"
    assert decision.reason == "ai_disclaimer"


@pytest.mark.asyncio
async def test_underage_user_is_blocked_for_restricted_topic() -> None:
    decision = await _pipeline().screen(LearningRequest(topic="wine tasting"), user_age=16)

    assert decision.allowed is False
    assert decision.reason == "age_restricted"
    assert decision.min_age == 18
    assert "18" in decision.message


@pytest.mark.asyncio
async def test_unknown_age_requires_verification() -> None:
    decision = await _pipeline().screen(LearningRequest(topic="firearms maintenance"))

    assert decision.allowed is True
    assert decision.requires_age_verification is True
    assert decision.min_age == 18
    assert AGE_SAFETY_WARNING in decision.warnings


@pytest.mark.asyncio
async def test_adult_passes_age_gate_without_verification_flag() -> None:
    decision = await _pipeline().screen(LearningRequest(topic="poker strategy"), user_age=25)

    assert decision.allowed is True
    assert decision.requires_age_verification is False
    assert decision.min_age == 18


@pytest.mark.asyncio
async def test_internal_failure_fails_closed() -> None:
    pipeline = SafetyScreeningPipeline(ClassificationService(None), prohibited=_BrokenClassifier())

    decision = await pipeline.screen(LearningRequest(topic="bee mating cycle"))

    assert decision.allowed is False
    assert decision.reason == "screening_failed"


def test_keyword_classifier_prefers_primary_table() -> None:
    classifier = KeywordClassifier(PROHIBITED_CONTENT, {"illegal_activities": {"forge": "forgery"}})

    primary = classifier.match("A history of FORGERY")
    variant = classifier.match("how to forge a signature")

    assert primary.keyword == "forgery"
    assert primary.matched_text == "forgery"
    assert variant.keyword == "forgery"
    assert variant.matched_text == "forge"
    assert classifier.match("gardening") is None


def test_generate_disclaimer_documents() -> None:
    medical = generate_disclaimer("medical", "fasting")
    safety = generate_disclaimer("safety_critical", "home wiring")

    assert medical["title"] == "Medical Information Disclaimer"
    assert medical["severity"] == "critical"
    assert '"fasting"' in medical["content"]
    assert medical["requires_acceptance"] is True
    assert safety["type"] == "safety"
    assert generate_disclaimer("none", "x") is None
    assert generate_disclaimer(None, "x") is None
