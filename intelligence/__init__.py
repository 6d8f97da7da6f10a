"""
Intelligence Module
LLM abstraction and the fail-open classification service
"""
from .llm import (
    BaseLLM,
    OpenAILLM,
    AnthropicLLM,
    DeepSeekLLM,
    get_llm,
)
from .classification import (
    ClassificationRequest,
    ClassificationResult,
    ClassificationService,
    CoverageJudgment,
    ObjectiveMatch,
    ObjectiveMatchBatch,
    SafetyJudgment,
    VideoBatchJudgment,
    VideoJudgment,
    extract_json_object,
)

__all__ = [
    # LLM
    "BaseLLM",
    "OpenAILLM",
    "AnthropicLLM",
    "DeepSeekLLM",
    "get_llm",
    # Classification
    "ClassificationRequest",
    "ClassificationResult",
    "ClassificationService",
    "CoverageJudgment",
    "ObjectiveMatch",
    "ObjectiveMatchBatch",
    "SafetyJudgment",
    "VideoBatchJudgment",
    "VideoJudgment",
    "extract_json_object",
]
