"""OpenAI LLM provider implementation."""

import logging
from typing import AsyncIterator, List, Optional
import tiktoken
from openai import AsyncOpenAI, OpenAIError

from llm.providers.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMError,
    LLMMessage,
    LLMProvider,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """OpenAI API provider."""

    def __init__(self, api_key: str, default_model: str = "gpt-4o-mini", client: Optional[AsyncOpenAI] = None):
        super().__init__(api_key, default_model)
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.provider_name = LLMProvider.OPENAI

    async def stream(
        self,
        messages: List[LLMMessage],
        config: Optional[LLMConfig] = None,
    ) -> AsyncIterator[str]:
        """Open a streaming chat completion."""
        cfg = self._create_default_config(config)

        # Convert messages to OpenAI format
        openai_messages = [
            {"role": msg.role, "content": msg.content}
            for msg in messages
        ]

        params = {
            "model": cfg.model,
            "messages": openai_messages,
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens,
            "top_p": cfg.top_p,
            "timeout": cfg.timeout,
            "stream": True,
        }

        if cfg.stop_sequences:
            params["stop"] = cfg.stop_sequences

        try:
            response = await self.client.chat.completions.create(**params)
        except OpenAIError as e:
            raise LLMError(
                f"OpenAI stream could not start: {e}",
                provider=self.provider_name.value,
                original_error=e,
            ) from e

        logger.debug(f"OpenAI stream opened for model {cfg.model}")
        return self._iter_deltas(response)

    async def _iter_deltas(self, response) -> AsyncIterator[str]:
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except OpenAIError as e:
            raise LLMError(
                f"OpenAI stream interrupted: {e}",
                provider=self.provider_name.value,
                original_error=e,
            ) from e

    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        """Count tokens using tiktoken."""
        try:
            encoding = tiktoken.encoding_for_model(model or self.default_model)
        except KeyError:
            # Default to cl100k_base for unknown models
            encoding = tiktoken.get_encoding("cl100k_base")

        return len(encoding.encode(text))
