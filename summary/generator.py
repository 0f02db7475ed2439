# Summary generator
"""Starts and tracks streamed summaries of execution reports"""
from collections import OrderedDict
from typing import AsyncIterator, List, Optional, Protocol, Set
import asyncio
import logging
import uuid

from events import EventBus
from execution.core.result import compute_statistics
from execution.models import ExecutionReport, SummaryUpstreamError
from execution.safety import TimeoutHandler
from llm.providers.base import LLMConfig, LLMMessage
from summary.prompts import SummaryPrompts
from summary.stream import SummaryStream

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """What the generator needs from an LLM provider or router"""

    async def stream(
        self,
        messages: List[LLMMessage],
        config: Optional[LLMConfig] = None,
    ) -> AsyncIterator[str]:
        ...

    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        ...


class SummaryGenerator:
    """
    Turns execution reports into streamed natural-language summaries.

    ``summarize`` returns as soon as the upstream stream has opened; tokens
    are pumped into the SummaryStream by a background task owned here.
    """

    def __init__(
        self,
        bus: EventBus,
        text_generator: TextGenerator,
        llm_config: Optional[LLMConfig] = None,
        start_timeout_seconds: float = 30,
        max_prompt_tokens: Optional[int] = 12000,
        max_retained: int = 100,
    ):
        self.bus = bus
        self.text_generator = text_generator
        self.llm_config = llm_config or LLMConfig()
        self.timeout_handler = TimeoutHandler(timeout_seconds=start_timeout_seconds)
        self.max_prompt_tokens = max_prompt_tokens
        self.max_retained = max_retained

        self._streams: "OrderedDict[str, SummaryStream]" = OrderedDict()
        self._tasks: Set[asyncio.Task] = set()

    async def summarize(self, report: ExecutionReport) -> SummaryStream:
        """
        Start summarizing a report

        Args:
            report: Report to summarize

        Returns:
            SummaryStream receiving the tokens

        Raises:
            SummaryUpstreamError if the text generator could not start
        """
        correlation_id = uuid.uuid4().hex
        statistics = compute_statistics(report)

        messages = SummaryPrompts.build_messages(
            report,
            statistics,
            count_tokens=self._count_tokens,
            max_prompt_tokens=self.max_prompt_tokens,
        )

        logger.debug(f"Requesting summary {correlation_id} for {report.project_root}")
        try:
            iterator = await self.timeout_handler.run(
                self.text_generator.stream(messages, self.llm_config),
                key="summary",
            )
        except Exception as e:
            raise SummaryUpstreamError(
                message=f"Summary stream could not start: {e}",
                details={"summary_id": correlation_id},
                original_error=e,
            ) from e

        stream = SummaryStream(correlation_id, report, self.bus)
        self._register(stream)

        task = asyncio.create_task(
            self._pump(stream, iterator),
            name=f"summary-{correlation_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info(f"Summary {correlation_id} started")
        return stream

    def _count_tokens(self, text: str) -> int:
        return self.text_generator.count_tokens(text, self.llm_config.model)

    async def _pump(self, stream: SummaryStream, iterator: AsyncIterator[str]):
        try:
            async for token in iterator:
                stream.append(token)
        except asyncio.CancelledError:
            stream.fail("summary cancelled")
            raise
        except Exception as e:
            stream.fail(str(e) or type(e).__name__)
        else:
            stream.complete()
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception as e:
                    logger.debug(f"Error closing upstream of {stream.correlation_id}: {e}")

    def _register(self, stream: SummaryStream):
        self._streams[stream.correlation_id] = stream

        overflow = len(self._streams) - self.max_retained
        if overflow <= 0:
            return
        for correlation_id in list(self._streams):
            if overflow <= 0:
                break
            if self._streams[correlation_id].state.is_terminal:
                del self._streams[correlation_id]
                overflow -= 1
                logger.debug(f"Evicted summary {correlation_id}")

    def get(self, correlation_id: str) -> Optional[SummaryStream]:
        return self._streams.get(correlation_id)

    def streams(self) -> List[SummaryStream]:
        return list(self._streams.values())

    async def aclose(self):
        """Cancel summaries still streaming"""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            logger.debug(f"Cancelling {len(tasks)} running summaries...")
            await asyncio.gather(*tasks, return_exceptions=True)

        for stream in self._streams.values():
            if not stream.state.is_terminal:
                stream.fail("summary cancelled")
