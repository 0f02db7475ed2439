"""Anthropic (Claude) LLM provider implementation."""

import logging
from typing import AsyncIterator, List, Optional
from anthropic import AsyncAnthropic, AnthropicError

from llm.providers.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMError,
    LLMMessage,
    LLMProvider,
)

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str, default_model: str = "claude-sonnet-4-5-20250929", client: Optional[AsyncAnthropic] = None):
        super().__init__(api_key, default_model)
        self.client = client or AsyncAnthropic(api_key=api_key)
        self.provider_name = LLMProvider.ANTHROPIC

    async def stream(
        self,
        messages: List[LLMMessage],
        config: Optional[LLMConfig] = None,
    ) -> AsyncIterator[str]:
        """Open a streaming message request."""
        cfg = self._create_default_config(config)

        # Separate system message from conversation
        system_message = None
        conversation_messages = []

        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                conversation_messages.append({
                    "role": msg.role,
                    "content": msg.content
                })

        params = {
            "model": cfg.model,
            "messages": conversation_messages,
            "max_tokens": cfg.max_tokens,
            "temperature": cfg.temperature,
            "timeout": cfg.timeout,
            "stream": True,
        }

        if system_message:
            params["system"] = system_message

        if cfg.stop_sequences:
            params["stop_sequences"] = cfg.stop_sequences

        try:
            response = await self.client.messages.create(**params)
        except AnthropicError as e:
            raise LLMError(
                f"Anthropic stream could not start: {e}",
                provider=self.provider_name.value,
                original_error=e,
            ) from e

        logger.debug(f"Anthropic stream opened for model {cfg.model}")
        return self._iter_deltas(response)

    async def _iter_deltas(self, response) -> AsyncIterator[str]:
        try:
            async for event in response:
                if event.type != "content_block_delta":
                    continue
                if getattr(event.delta, "type", None) == "text_delta" and event.delta.text:
                    yield event.delta.text
        except AnthropicError as e:
            raise LLMError(
                f"Anthropic stream interrupted: {e}",
                provider=self.provider_name.value,
                original_error=e,
            ) from e

    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        """
        Approximate token count for Claude.
        Claude uses ~4 characters per token on average.
        """
        return len(text) // 4
