"""
OpenAI LLM
Chat completions through the official SDK; also the base for OpenAI-compatible APIs
"""
import inspect
import logging
from typing import List, Optional

from utils.exceptions import LLMError

from .base import BaseLLM, LLMResponse, Message


logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """OpenAI chat completions (gpt-4o-mini by default)"""

    DEFAULT_BASE_URL: Optional[str] = None

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self._async_client = None

    @property
    def provider(self) -> str:
        return "openai"

    def _get_async_client(self):
        if self._async_client is None:
            from openai import AsyncOpenAI
            self._async_client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._async_client

    def _request_params(self, messages: List[Message], **kwargs) -> dict:
        params = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if kwargs.get("json_mode"):
            params["response_format"] = {"type": "json_object"}
        return params

    async def acomplete(self, messages: List[Message], **kwargs) -> LLMResponse:
        client = self._get_async_client()
        try:
            response = await client.chat.completions.create(**self._request_params(messages, **kwargs))
        except Exception as e:
            raise LLMError(f"{self.provider} request failed: {e}", provider=self.provider) from e

        choice = response.choices[0]
        usage = response.usage
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0,
            },
            finish_reason=choice.finish_reason,
        )

    async def aclose(self) -> None:
        client = self._async_client
        if client is None:
            return
        self._async_client = None
        close_fn = getattr(client, "close", None)
        if not callable(close_fn):
            return
        try:
            maybe_awaitable = close_fn()
            if inspect.isawaitable(maybe_awaitable):
                await maybe_awaitable
        except Exception as e:
            logger.debug(f"[{self.provider}] client close failed: {e}")
