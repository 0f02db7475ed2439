# Service wiring
"""Builds and owns the orchestration components"""
from typing import Any, Mapping, Optional
import logging

from app.settings import Settings
from capabilities import CapabilityAggregator, load_provider_configs
from events import EventBus
from execution.core import PlanDispatcher, ResultCollector
from llm import (
    AnthropicProvider,
    LLMConfig,
    LLMProvider,
    LLMRouter,
    OpenAIProvider,
    RouteConfig,
)
from summary import SummaryGenerator, TextGenerator

logger = logging.getLogger(__name__)


def build_text_generator(settings: Settings) -> LLMRouter:
    """Router over every provider that has an API key"""
    primary = settings.ai_provider

    providers = {}
    if settings.openai_api_key:
        providers[LLMProvider.OPENAI] = OpenAIProvider(api_key=settings.openai_api_key)
    if settings.anthropic_api_key:
        providers[LLMProvider.ANTHROPIC] = AnthropicProvider(api_key=settings.anthropic_api_key)

    if settings.ai_model and primary in providers:
        providers[primary].default_model = settings.ai_model

    if not providers:
        logger.warning("No LLM API key configured; summaries will be unavailable")

    fallbacks = [name for name in providers if name != primary]
    return LLMRouter(
        providers,
        RouteConfig(primary_provider=primary, fallback_providers=fallbacks),
    )


class Orchestrator:
    """Event bus, aggregator, dispatcher, collector and summary generator"""

    def __init__(
        self,
        settings: Settings,
        text_generator: Optional[TextGenerator] = None,
        aggregator: Optional[CapabilityAggregator] = None,
    ):
        self.settings = settings
        self.bus = EventBus()

        self.aggregator = aggregator or CapabilityAggregator(
            connect_timeout_seconds=settings.provider_connect_timeout,
            connect_attempts=settings.provider_connect_attempts,
        )
        self.summarizer = SummaryGenerator(
            self.bus,
            text_generator or build_text_generator(settings),
            llm_config=LLMConfig(),
            start_timeout_seconds=settings.summary_start_timeout,
            max_prompt_tokens=settings.summary_max_prompt_tokens,
            max_retained=settings.summary_retained,
        )
        self.dispatcher = PlanDispatcher(self.bus)
        self.collector = ResultCollector(self.bus, self.summarizer)

    def provider_configs(self) -> Mapping[str, Any]:
        return load_provider_configs(self.settings.config_path)

    async def start(self):
        configs = self.provider_configs()
        _, status = await self.aggregator.aggregate(configs)
        logger.info(
            f"Orchestrator started: aggregator {status.state.value}, "
            f"{status.connected_providers} provider(s) connected"
        )

    async def stop(self):
        await self.summarizer.aclose()
        await self.aggregator.close()
        await self.bus.drain()
        logger.info("Orchestrator stopped")
