"""
LLM Factory
Builds a provider instance from explicit settings
"""
import logging
from typing import Optional

from config.settings import LLMSettings
from utils.exceptions import ConfigurationError

from .anthropic_llm import AnthropicLLM
from .base import BaseLLM
from .deepseek_llm import DeepSeekLLM
from .openai_llm import OpenAILLM


logger = logging.getLogger(__name__)


DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "deepseek": "deepseek-chat",
}


def get_llm(settings: LLMSettings, provider: Optional[str] = None, **kwargs) -> Optional[BaseLLM]:
    """
    Create the configured LLM.

    Returns None when the provider has no API key, so callers run on their
    deterministic defaults instead of failing at the first request.

    Example:
        llm = get_llm(settings.llm)
        llm = get_llm(settings.llm, provider="deepseek", timeout=30)
    """
    provider = provider or settings.provider
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}", {"provider": provider})

    api_key = kwargs.pop("api_key", None) or settings.api_key_for(provider)
    if not api_key:
        logger.info(f"[LLM] no API key for {provider}; AI classification disabled")
        return None

    model = kwargs.pop("model", None) or settings.model_name or DEFAULT_MODELS[provider]
    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)

    if provider == "openai":
        return OpenAILLM(model=model, api_key=api_key, base_url=settings.base_url, **kwargs)
    if provider == "deepseek":
        return DeepSeekLLM(model=model, api_key=api_key, base_url=settings.base_url, **kwargs)
    return AnthropicLLM(model=model, api_key=api_key, **kwargs)
