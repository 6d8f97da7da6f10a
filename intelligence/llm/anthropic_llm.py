"""
Anthropic LLM
Messages API through the official SDK
"""
import inspect
import logging
from typing import List, Optional, Tuple

from utils.exceptions import LLMError

from .base import BaseLLM, LLMResponse, Message, MessageRole


logger = logging.getLogger(__name__)


class AnthropicLLM(BaseLLM):
    """Anthropic Claude messages"""

    def __init__(
        self,
        model: str = "claude-3-5-haiku-latest",
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self._async_client = None

    @property
    def provider(self) -> str:
        return "anthropic"

    def _get_async_client(self):
        if self._async_client is None:
            from anthropic import AsyncAnthropic
            self._async_client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        return self._async_client

    @staticmethod
    def _split_system(messages: List[Message]) -> Tuple[Optional[str], List[dict]]:
        """The system prompt is a top-level parameter here, not a message."""
        system_prompt = None
        converted = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_prompt = msg.content
            else:
                converted.append(msg.to_dict())
        return system_prompt, converted

    async def acomplete(self, messages: List[Message], **kwargs) -> LLMResponse:
        client = self._get_async_client()
        system_prompt, converted = self._split_system(messages)

        request_params = {
            "model": self.model,
            "messages": converted,
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if system_prompt:
            request_params["system"] = system_prompt

        try:
            response = await client.messages.create(**request_params)
        except Exception as e:
            raise LLMError(f"anthropic request failed: {e}", provider=self.provider) from e

        content = "".join(block.text for block in response.content if block.type == "text")
        return LLMResponse(
            content=content,
            model=response.model,
            usage={
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            },
            finish_reason=response.stop_reason,
        )

    async def aclose(self) -> None:
        client = self._async_client
        if client is None:
            return
        self._async_client = None
        try:
            maybe_awaitable = client.close()
            if inspect.isawaitable(maybe_awaitable):
                await maybe_awaitable
        except Exception as e:
            logger.debug(f"[anthropic] client close failed: {e}")
