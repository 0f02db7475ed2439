# Summary stream buffer
"""
Buffered, forward-only sequence of summary tokens.

Every appended token is kept and also published on the stream's
``summary.stream.<id>`` topic. Late readers attach to get the buffered
prefix followed by live events.
"""
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional
import asyncio
import logging
import threading

from events import EventBus, Subscription, summary_topic
from execution.models import ExecutionReport, SummaryState
from execution.models.base import FrozenWireModel

logger = logging.getLogger(__name__)


class SummaryEventKind(str, Enum):
    TOKEN = "token"
    DONE = "done"
    ERROR = "error"


class SummaryEvent(FrozenWireModel):
    """One item published on a summary topic"""
    correlation_id: str
    kind: SummaryEventKind
    index: int
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind != SummaryEventKind.TOKEN


class SummaryStream:
    """Token buffer for one summary run"""

    def __init__(self, correlation_id: str, report: ExecutionReport, bus: EventBus):
        self.correlation_id = correlation_id
        self.report = report
        self.topic = summary_topic(correlation_id)
        self._bus = bus
        self._state = SummaryState.PENDING
        self._events: List[SummaryEvent] = []
        self._tokens: List[str] = []
        self._error: Optional[str] = None
        # appends, snapshots and attaches share this lock
        self._lock = threading.RLock()

    @property
    def state(self) -> SummaryState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def text(self) -> str:
        with self._lock:
            return "".join(self._tokens)

    @property
    def tokens(self) -> List[str]:
        with self._lock:
            return list(self._tokens)

    def snapshot(self) -> List[SummaryEvent]:
        with self._lock:
            return list(self._events)

    def append(self, token: str):
        """Buffer and publish one token"""
        with self._lock:
            if self._state.is_terminal:
                logger.warning(f"Token for finished summary {self.correlation_id} ignored")
                return
            self._state = SummaryState.STREAMING
            self._tokens.append(token)
            self._emit(SummaryEventKind.TOKEN, text=token)

    def complete(self):
        with self._lock:
            if self._state.is_terminal:
                return
            self._state = SummaryState.COMPLETED
            self._emit(SummaryEventKind.DONE)
        logger.info(f"Summary {self.correlation_id} completed ({len(self._tokens)} tokens)")

    def fail(self, error: str):
        with self._lock:
            if self._state.is_terminal:
                return
            self._state = SummaryState.FAILED
            self._error = error
            self._emit(SummaryEventKind.ERROR, error=error)
        logger.warning(f"Summary {self.correlation_id} failed: {error}")

    def _emit(self, kind: SummaryEventKind, text: Optional[str] = None, error: Optional[str] = None):
        event = SummaryEvent(
            correlation_id=self.correlation_id,
            kind=kind,
            index=len(self._events),
            text=text,
            error=error,
        )
        self._events.append(event)
        self._bus.publish(self.topic, event)

    def attach(self, handler: Callable[[SummaryEvent], Any]) -> Subscription:
        """
        Replay buffered events to handler, then deliver live ones

        Args:
            handler: Called once per SummaryEvent, in index order

        Returns:
            Subscription; already cancelled if the stream had finished
        """
        with self._lock:
            subscription = self._bus.subscribe(self.topic, handler)
            for event in self._events:
                self._bus.deliver(subscription, event)
            if self._state.is_terminal:
                subscription.cancel()
        return subscription

    async def events(self) -> AsyncIterator[SummaryEvent]:
        """Iterate over buffered then live events up to the terminal one"""
        queue: asyncio.Queue = asyncio.Queue()
        loop = asyncio.get_running_loop()

        def enqueue(event: SummaryEvent):
            loop.call_soon_threadsafe(queue.put_nowait, event)

        subscription = self.attach(enqueue)
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            subscription.cancel()

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "summaryId": self.correlation_id,
                "state": self._state.value,
                "text": "".join(self._tokens),
                "error": self._error,
            }

    def __repr__(self) -> str:
        return f"SummaryStream({self.correlation_id!r}, state={self._state.value})"
