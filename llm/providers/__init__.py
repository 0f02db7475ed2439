# provider integrations
"""LLM providers package."""

from llm.providers.base import (
    BaseLLMProvider,
    LLMProvider,
    LLMMessage,
    LLMConfig,
    LLMError,
)
from llm.providers.openai import OpenAIProvider
from llm.providers.anthropic import AnthropicProvider

__all__ = [
    "BaseLLMProvider",
    "LLMProvider",
    "LLMMessage",
    "LLMConfig",
    "LLMError",
    "OpenAIProvider",
    "AnthropicProvider",
]
