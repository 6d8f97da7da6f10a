"""
DeepSeek LLM
OpenAI-compatible endpoint
"""
from typing import Optional

from .openai_llm import OpenAILLM


class DeepSeekLLM(OpenAILLM):
    """DeepSeek chat (deepseek-chat by default)"""

    DEFAULT_BASE_URL = "https://api.deepseek.com"

    def __init__(
        self,
        model: str = "deepseek-chat",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout: float = 120.0,
        **kwargs,
    ):
        super().__init__(model, api_key, base_url, temperature, max_tokens, timeout, **kwargs)

    @property
    def provider(self) -> str:
        return "deepseek"
