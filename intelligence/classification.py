"""
Classification Service
Single entry point for AI judgments (video relevance, request safety, topic
coverage). Every call site supplies its own default; the service never raises.
"""
import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config.settings import ClassificationSettings
from utils.exceptions import ClassificationServiceUnavailable, LLMError

from .llm.base import BaseLLM


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SYSTEM_PROMPT = (
    "You are an educational content analyst. "
    "Respond with a single JSON object and nothing else."
)


@dataclass
class ClassificationRequest:
    """One judgment to make: a task label for logging plus the prompt"""
    task: str
    prompt: str
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


@dataclass
class ClassificationResult(Generic[T]):
    """
    Outcome of a classification call.

    ``ok`` is False whenever ``value`` is the caller's default: the service
    was absent, timed out, or returned output that did not validate.
    """
    value: T
    ok: bool
    error: Optional[str] = None


class _Judgment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VideoJudgment(_Judgment):
    index: int
    relevance: float = Field(ge=0.0, le=1.0)
    educational: float = Field(ge=0.0, le=1.0)
    level_match: float = Field(alias="levelMatch", ge=0.0, le=1.0)
    reason: str = ""


class VideoBatchJudgment(_Judgment):
    videos: List[VideoJudgment] = Field(default_factory=list)


class SafetyJudgment(_Judgment):
    safe: bool = True
    allow_with_disclaimer: bool = Field(default=False, alias="allowWithDisclaimer")
    reason: str = ""
    educational_value: str = Field(default="", alias="educationalValue")
    disclaimer: Optional[str] = None
    educational_context: Optional[str] = Field(default=None, alias="educationalContext")


class CoverageJudgment(_Judgment):
    coverage_score: float = Field(alias="coverageScore", ge=0.0, le=1.0)
    main_topics_covered: List[str] = Field(default_factory=list, alias="mainTopicsCovered")
    missing_topics: List[str] = Field(default_factory=list, alias="missingTopics")
    level_appropriate: bool = Field(default=True, alias="levelAppropriate")
    assessment: str = ""


class ObjectiveMatch(_Judgment):
    content_index: int = Field(alias="contentIndex")
    relevance_score: float = Field(alias="relevanceScore", ge=0.0, le=1.0)
    matched_objectives: List[int] = Field(default_factory=list, alias="matchedObjectives")
    matched_concepts: List[str] = Field(default_factory=list, alias="matchedConcepts")
    reasoning: str = ""


class ObjectiveMatchBatch(_Judgment):
    matches: List[ObjectiveMatch] = Field(default_factory=list)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the first JSON object in an LLM reply, tolerating prose around it."""
    raw = (text or "").strip()
    if not raw:
        raise ValueError("empty response")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", raw)
        if not match:
            raise ValueError("no JSON object in response")
        parsed = json.loads(match.group())
    if not isinstance(parsed, dict):
        raise ValueError(f"expected JSON object, got {type(parsed).__name__}")
    return parsed


class ClassificationService:
    """
    Fail-open wrapper around an optional LLM.

    Example:
        result = await service.classify(
            ClassificationRequest(task="coverage", prompt=prompt),
            response_model=CoverageJudgment,
            default=None,
        )
        if result.ok:
            ...
    """

    def __init__(self, llm: Optional[BaseLLM], settings: Optional[ClassificationSettings] = None):
        self.llm = llm
        self.settings = settings or ClassificationSettings()

    @property
    def available(self) -> bool:
        return self.llm is not None and self.settings.enabled

    async def classify(
        self,
        request: ClassificationRequest,
        *,
        response_model: Type[BaseModel],
        default: T,
    ) -> ClassificationResult:
        try:
            value = await self._invoke(request, response_model)
            return ClassificationResult(value=value, ok=True)
        except ClassificationServiceUnavailable as e:
            logger.warning(f"[Classifier:{request.task}] falling back to default: {e.message}")
            return ClassificationResult(value=default, ok=False, error=e.message)

    async def _invoke(self, request: ClassificationRequest, response_model: Type[BaseModel]) -> BaseModel:
        if not self.available:
            raise ClassificationServiceUnavailable("classification service not configured")

        provider = self.llm.provider
        try:
            content = await asyncio.wait_for(
                self.llm.achat(
                    request.prompt,
                    system_prompt=request.system_prompt,
                    json_mode=True,
                ),
                timeout=self.settings.timeout_sec,
            )
        except asyncio.TimeoutError:
            raise ClassificationServiceUnavailable(
                f"timed out after {self.settings.timeout_sec}s", provider=provider
            )
        except LLMError as e:
            raise ClassificationServiceUnavailable(e.message, provider=e.provider or provider)
        except Exception as e:
            raise ClassificationServiceUnavailable(f"call failed: {e}", provider=provider)

        try:
            return response_model.model_validate(extract_json_object(content))
        except (ValueError, ValidationError) as e:
            raise ClassificationServiceUnavailable(f"malformed response: {e}", provider=provider)

    async def aclose(self) -> None:
        if self.llm is not None:
            await self.llm.aclose()
