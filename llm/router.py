# LLM router
"""LLM router with provider fallback."""

import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional
from dataclasses import dataclass, field

from execution.safety import CircuitBreaker, CircuitBreakerConfig
from llm.providers.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMError,
    LLMMessage,
    LLMProvider,
)

logger = logging.getLogger(__name__)


@dataclass
class RouteConfig:
    """Configuration for LLM routing."""
    primary_provider: LLMProvider = LLMProvider.OPENAI
    fallback_providers: List[LLMProvider] = field(default_factory=list)
    failure_threshold: int = 3
    recovery_timeout_seconds: float = 30


class LLMRouter:
    """
    Routes LLM requests to appropriate providers with fallback support.
    """

    def __init__(
        self,
        providers: Dict[LLMProvider, BaseLLMProvider],
        route_config: Optional[RouteConfig] = None,
    ):
        self.providers = providers
        self.config = route_config or RouteConfig()
        self.circuit_breaker = CircuitBreaker(
            CircuitBreakerConfig(
                failure_threshold=self.config.failure_threshold,
                recovery_timeout_seconds=self.config.recovery_timeout_seconds,
            )
        )

    async def stream(
        self,
        messages: List[LLMMessage],
        llm_config: Optional[LLMConfig] = None,
    ) -> AsyncIterator[str]:
        """
        Open a completion stream on the first healthy provider.

        Args:
            messages: Conversation to complete
            llm_config: Optional call configuration

        Returns:
            Async iterator of text deltas

        Raises:
            LLMError if no provider could start a stream
        """
        last_error = None

        for provider_name in self._determine_provider_order():
            provider = self.providers.get(provider_name)
            if not provider:
                continue

            if not self.circuit_breaker.allow(provider_name.value):
                logger.debug(f"Skipping {provider_name.value}: circuit open")
                continue

            try:
                iterator = await provider.stream(messages, llm_config)
            except asyncio.CancelledError:
                # cancelled by the start timeout or by shutdown
                self.circuit_breaker.record_failure(provider_name.value)
                raise
            except Exception as e:
                last_error = e
                self.circuit_breaker.record_failure(provider_name.value)
                logger.warning(f"Provider {provider_name.value} failed to start stream: {e}")
                continue

            self.circuit_breaker.record_success(provider_name.value)
            return iterator

        raise LLMError(f"All providers failed. Last error: {last_error}", original_error=last_error)

    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        """Count tokens with the primary provider's tokenizer."""
        for provider_name in self._determine_provider_order():
            provider = self.providers.get(provider_name)
            if provider:
                return provider.count_tokens(text, model)
        return len(text) // 4

    def _determine_provider_order(self) -> List[LLMProvider]:
        order = [self.config.primary_provider]
        for provider_name in self.config.fallback_providers:
            if provider_name not in order:
                order.append(provider_name)
        return order

    def get_provider_stats(self) -> Dict:
        """Get circuit breaker stats for monitoring."""
        return self.circuit_breaker.get_status()
