"""Base LLM provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional
from enum import Enum


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class LLMError(Exception):
    """Raised when a provider cannot produce a completion stream."""

    def __init__(self, message: str, provider: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.original_error = original_error


@dataclass
class LLMMessage:
    """Structured message for LLM conversations."""
    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class LLMConfig:
    """Configuration for LLM calls."""
    model: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 1000
    top_p: float = 1.0
    stop_sequences: Optional[List[str]] = None
    timeout: int = 30


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, api_key: str, default_model: str):
        self.api_key = api_key
        self.default_model = default_model

    @abstractmethod
    async def stream(
        self,
        messages: List[LLMMessage],
        config: Optional[LLMConfig] = None,
    ) -> AsyncIterator[str]:
        """
        Open a completion stream.

        Awaiting this sends the request; the returned iterator yields text
        deltas. Raises LLMError if the request cannot be started, and from
        the iterator if the stream breaks off.
        """
        pass

    @abstractmethod
    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        """Count tokens in text for given model."""
        pass

    def _create_default_config(self, overrides: Optional[LLMConfig] = None) -> LLMConfig:
        """Create config with defaults and overrides."""
        cfg = overrides or LLMConfig()
        if cfg.model is None:
            cfg = LLMConfig(
                model=self.default_model,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
                top_p=cfg.top_p,
                stop_sequences=cfg.stop_sequences,
                timeout=cfg.timeout,
            )
        return cfg
