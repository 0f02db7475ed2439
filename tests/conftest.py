"""Shared fixtures and in-memory fakes for providers and text generation."""

import asyncio
from typing import Any, Dict, List, Optional, Union

import pytest

from capabilities import (
    CapabilityAggregator,
    OperationSpec,
    ProviderConnector,
    ProviderSession,
    TransportKind,
)
from events import EventBus
from execution.core import ResultCollector
from execution.models import ExecutionReport
from llm import LLMError
from summary import SummaryGenerator


class FakeSession(ProviderSession):
    """Provider session with a fixed operation list."""

    def __init__(self, name: str, operations: List[str], fail_listing: bool = False):
        self.name = name
        self.specs = [
            OperationSpec(
                name=op,
                description=f"{op} operation",
                input_schema={
                    "type": "object",
                    "properties": {"path": {"type": "string"}},
                    "required": ["path"],
                },
            )
            for op in operations
        ]
        self.fail_listing = fail_listing
        self.calls: List[tuple] = []
        self.close_count = 0

    async def list_operations(self) -> List[OperationSpec]:
        if self.fail_listing:
            raise RuntimeError(f"{self.name} cannot list tools")
        return list(self.specs)

    async def call_operation(self, name: str, arguments: Dict[str, Any]) -> Any:
        self.calls.append((name, arguments))
        return {"operation": name, "arguments": arguments}

    async def close(self):
        self.close_count += 1

    @property
    def closed(self) -> bool:
        return self.close_count > 0


class FakeConnector(ProviderConnector):
    """Hands out prepared sessions, or raises for providers set to fail."""

    def __init__(self, outcomes: Optional[Dict[str, Union[FakeSession, Exception]]] = None, delay: float = 0):
        self.outcomes = outcomes or {}
        self.delay = delay
        self.attempts: Dict[str, int] = {}

    async def connect(self, name: str, config) -> ProviderSession:
        self.attempts[name] = self.attempts.get(name, 0) + 1
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.get(name)
        if outcome is None:
            raise ConnectionError(f"no such provider: {name}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeTextGenerator:
    """Streams a fixed token list; can fail to start or break mid-stream."""

    def __init__(
        self,
        tokens: Optional[List[str]] = None,
        fail_start: bool = False,
        fail_after: Optional[int] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.tokens = tokens if tokens is not None else ["# Summary", "\n", "All ", "good."]
        self.fail_start = fail_start
        self.fail_after = fail_after
        self.gate = gate
        self.requests: List[list] = []

    async def stream(self, messages, config=None):
        self.requests.append(messages)
        if self.fail_start:
            raise LLMError("upstream unavailable", provider="fake")
        return self._iterate()

    async def _iterate(self):
        for index, token in enumerate(self.tokens):
            if self.fail_after is not None and index >= self.fail_after:
                raise LLMError("connection reset", provider="fake")
            if self.gate is not None:
                await self.gate.wait()
            yield token
            await asyncio.sleep(0)

    def count_tokens(self, text: str, model: Optional[str] = None) -> int:
        return len(text.split())


def make_aggregator(connector: FakeConnector, **kwargs) -> CapabilityAggregator:
    return CapabilityAggregator(
        connectors={
            TransportKind.SUBPROCESS: connector,
            TransportKind.NETWORK: connector,
        },
        **kwargs,
    )


async def wait_for_terminal(stream, timeout: float = 2.0):
    async def _wait():
        while not stream.state.is_terminal:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_wait(), timeout)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
async def summarizer(bus, text_generator):
    generator = SummaryGenerator(bus, text_generator, start_timeout_seconds=1)
    yield generator
    await generator.aclose()


@pytest.fixture
def collector(bus, summarizer):
    return ResultCollector(bus, summarizer)


@pytest.fixture
def sample_report() -> ExecutionReport:
    """A create success and a shell failure."""
    return ExecutionReport.model_validate({
        "projectRoot": "/tmp/project",
        "success": False,
        "timestamp": 1700000000000,
        "actions": [
            {
                "type": "create",
                "target": "src/index.ts",
                "status": "success",
                "message": "Created src/index.ts",
            },
            {
                "type": "shell",
                "command": "npm test",
                "status": "failure",
                "message": "Command failed",
                "error": "exit code 1",
            },
        ],
    })
