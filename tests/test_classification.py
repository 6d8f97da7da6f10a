"""Classification service contract: callers always get a value back."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from config.settings import ClassificationSettings
from intelligence.classification import (
    ClassificationRequest,
    ClassificationService,
    CoverageJudgment,
    SafetyJudgment,
    extract_json_object,
)
from intelligence.llm import AnthropicLLM, OpenAILLM
from intelligence.llm.base import BaseLLM, LLMResponse
from utils.exceptions import LLMError


class _FakeLLM(BaseLLM):
    def __init__(self, reply: str = "", delay: float = 0.0, error: Exception = None):
        super().__init__(model="fake")
        self.reply = reply
        self.delay = delay
        self.error = error
        self.kwargs = {}
        self.closed = False

    @property
    def provider(self) -> str:
        return "fake"

    async def acomplete(self, messages, **kwargs) -> LLMResponse:
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model)

    async def aclose(self) -> None:
        self.closed = True


REQUEST = ClassificationRequest(task="coverage", prompt="Judge this path")


@pytest.mark.asyncio
async def test_valid_reply_is_parsed_into_model() -> None:
    llm = _FakeLLM('Sure! {"coverageScore": 0.7, "missingTopics": ["proofs"]} hope that helps')
    service = ClassificationService(llm)

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is True
    assert result.value.coverage_score == 0.7
    assert result.value.missing_topics == ["proofs"]
    assert llm.kwargs["json_mode"] is True
    assert "temperature" not in llm.kwargs


@pytest.mark.asyncio
async def test_missing_llm_returns_default() -> None:
    default = SafetyJudgment(safe=True)
    service = ClassificationService(None)

    result = await service.classify(REQUEST, response_model=SafetyJudgment, default=default)

    assert service.available is False
    assert result.ok is False
    assert result.value is default


@pytest.mark.asyncio
async def test_disabled_setting_short_circuits_the_llm() -> None:
    llm = _FakeLLM('{"coverageScore": 0.9}')
    service = ClassificationService(llm, ClassificationSettings(enabled=False))

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is False
    assert llm.kwargs == {}


@pytest.mark.parametrize(
    "reply",
    [
        "",
        "no json here",
        '["a", "list"]',
        '{"coverageScore": 4.2}',
        '{"coverageScore": "lots"}',
    ],
)
@pytest.mark.asyncio
async def test_malformed_replies_fall_back(reply: str) -> None:
    service = ClassificationService(_FakeLLM(reply))

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is False
    assert result.value is None
    assert "malformed" in result.error


@pytest.mark.asyncio
async def test_provider_error_falls_back() -> None:
    service = ClassificationService(_FakeLLM(error=RuntimeError("503 from upstream")))

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is False
    assert "503" in result.error


@pytest.mark.asyncio
async def test_slow_provider_times_out() -> None:
    service = ClassificationService(
        _FakeLLM('{"coverageScore": 0.9}', delay=1.0),
        ClassificationSettings(timeout_sec=0.05),
    )

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is False
    assert "timed out" in result.error


@pytest.mark.asyncio
async def test_aclose_releases_llm() -> None:
    llm = _FakeLLM()
    await ClassificationService(llm).aclose()
    assert llm.closed is True


def test_extract_json_object_tolerates_fences() -> None:
    assert extract_json_object('```json\n{"safe": false}\n```') == {"safe": False}


def test_safety_judgment_accepts_camel_case_keys() -> None:
    judgment = SafetyJudgment.model_validate(
        {"safe": False, "allowWithDisclaimer": True, "disclaimer": "medical", "unknown": 1}
    )
    assert judgment.allow_with_disclaimer is True
    assert judgment.disclaimer == "medical"


async def _failing_create(**kwargs):
    raise RuntimeError("401 invalid key")


@pytest.mark.asyncio
async def test_sdk_failures_surface_as_llm_errors() -> None:
    openai_llm = OpenAILLM(api_key="k")
    openai_llm._async_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=_failing_create)))
    anthropic_llm = AnthropicLLM(api_key="k")
    anthropic_llm._async_client = SimpleNamespace(messages=SimpleNamespace(create=_failing_create))

    with pytest.raises(LLMError) as excinfo:
        await openai_llm.achat("hi")
    assert excinfo.value.provider == "openai"
    with pytest.raises(LLMError):
        await anthropic_llm.achat("hi")


@pytest.mark.asyncio
async def test_llm_error_message_reaches_the_result() -> None:
    service = ClassificationService(_FakeLLM(error=LLMError("quota exceeded", provider="fake")))

    result = await service.classify(REQUEST, response_model=CoverageJudgment, default=None)

    assert result.ok is False
    assert result.error == "quota exceeded"
