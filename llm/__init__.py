"""LLM module for provider management and routing."""

# Core components
from llm.router import LLMRouter, RouteConfig

# Providers
from llm.providers.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMConfig,
    LLMError,
    LLMProvider,
)
from llm.providers.openai import OpenAIProvider
from llm.providers.anthropic import AnthropicProvider

__all__ = [
    # Router
    "LLMRouter",
    "RouteConfig",

    # Providers
    "BaseLLMProvider",
    "LLMMessage",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
]
