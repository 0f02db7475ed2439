# Topic-keyed publish/subscribe
"""Event bus connecting the dispatcher, collector and summary generator"""
from typing import Any, Callable, Dict, List, Optional, Set
from collections import defaultdict
import asyncio
import inspect
import logging
import threading
import uuid

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


class Subscription:
    """Cancellation handle returned by EventBus.subscribe"""

    def __init__(self, bus: "EventBus", topic: str, handler: Handler):
        self.id = uuid.uuid4().hex
        self.topic = topic
        self.handler = handler
        self._bus = bus
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        """Stop receiving messages. Safe to call more than once."""
        if self._active:
            self._active = False
            self._bus._remove(self)

    def __repr__(self) -> str:
        return f"Subscription(topic={self.topic!r}, active={self._active})"


class EventBus:
    """
    Synchronous publish/subscribe keyed by topic name.

    Delivery is in subscription order to the handlers registered when
    ``publish`` is called. Nothing is buffered: a handler subscribed after
    a publish never sees that message. A failing handler is logged and
    skipped. Handlers that return an awaitable have it scheduled on the
    running event loop.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Subscription]] = defaultdict(list)
        self._lock = threading.RLock()
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        """
        Register handler for topic

        Args:
            topic: Topic name
            handler: Callable receiving the payload

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, topic, handler)
        with self._lock:
            self._subscribers[topic].append(subscription)
        logger.debug(f"Subscribed {subscription.id} to {topic}")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        """Idempotent alias for subscription.cancel()"""
        subscription.cancel()

    def _remove(self, subscription: Subscription):
        with self._lock:
            handlers = self._subscribers.get(subscription.topic)
            if not handlers:
                return
            try:
                handlers.remove(subscription)
            except ValueError:
                return
            if not handlers:
                del self._subscribers[subscription.topic]
        logger.debug(f"Unsubscribed {subscription.id} from {subscription.topic}")

    def publish(self, topic: str, payload: Any) -> int:
        """
        Deliver payload to every current subscriber of topic

        Args:
            topic: Topic name
            payload: Message body, passed as-is

        Returns:
            Number of handlers invoked
        """
        with self._lock:
            snapshot = list(self._subscribers.get(topic, ()))

        delivered = 0
        for subscription in snapshot:
            if not subscription.active:
                continue
            delivered += 1
            self.deliver(subscription, payload)

        return delivered

    def deliver(self, subscription: Subscription, payload: Any):
        """Invoke one subscription's handler with the usual isolation"""
        try:
            result = subscription.handler(payload)
        except Exception as e:
            logger.error(
                f"Handler {subscription.id} failed on {subscription.topic}: {e}",
                exc_info=True,
            )
            return

        if inspect.isawaitable(result):
            self._schedule(subscription.topic, subscription, result)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def topics(self) -> List[str]:
        with self._lock:
            return list(self._subscribers.keys())

    def _schedule(self, topic: str, subscription: Subscription, awaitable):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                f"Async handler {subscription.id} on {topic} "
                f"dropped: no running event loop"
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)

        def _done(t: asyncio.Task):
            self._pending.discard(t)
            if t.cancelled():
                return
            error: Optional[BaseException] = t.exception()
            if error is not None:
                logger.error(
                    f"Async handler {subscription.id} failed on {topic}: {error}",
                    exc_info=error,
                )

        task.add_done_callback(_done)

    async def drain(self):
        """Wait for scheduled async handlers to finish"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
