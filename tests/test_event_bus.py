"""Tests for events/bus.py."""

import asyncio

from events import EventBus, PLAN_DISPATCHED, summary_topic


class TestPublish:
    """Synchronous delivery semantics."""

    def test_delivers_in_subscription_order(self, bus):
        received = []
        bus.subscribe("t", lambda p: received.append(("a", p)))
        bus.subscribe("t", lambda p: received.append(("b", p)))

        delivered = bus.publish("t", 1)

        assert delivered == 2
        assert received == [("a", 1), ("b", 1)]

    def test_no_subscribers_returns_zero(self, bus):
        assert bus.publish("nobody", {"x": 1}) == 0

    def test_late_subscriber_misses_earlier_message(self, bus):
        bus.publish("t", "early")
        received = []
        bus.subscribe("t", received.append)

        bus.publish("t", "late")

        assert received == ["late"]

    def test_topics_are_isolated(self, bus):
        received = []
        bus.subscribe(PLAN_DISPATCHED, received.append)

        bus.publish(summary_topic("abc"), "token")

        assert received == []

    def test_failing_handler_does_not_stop_others(self, bus):
        received = []

        def broken(payload):
            raise ValueError("boom")

        bus.subscribe("t", broken)
        bus.subscribe("t", received.append)

        assert bus.publish("t", "payload") == 2
        assert received == ["payload"]

    def test_subscribe_during_publish_uses_snapshot(self, bus):
        received = []

        def first(payload):
            received.append("first")
            bus.subscribe("t", lambda p: received.append("added"))

        bus.subscribe("t", first)
        second = bus.subscribe("t", lambda p: received.append("second"))

        bus.publish("t", None)

        assert received == ["first", "second"]
        second.cancel()
        assert bus.subscriber_count("t") == 2


class TestSubscription:
    """Cancellation handles."""

    def test_cancel_is_idempotent(self, bus):
        subscription = bus.subscribe("t", lambda p: None)

        subscription.cancel()
        subscription.cancel()
        bus.unsubscribe(subscription)

        assert not subscription.active
        assert bus.subscriber_count("t") == 0

    def test_cancelled_handler_receives_nothing(self, bus):
        received = []
        subscription = bus.subscribe("t", received.append)
        subscription.cancel()

        assert bus.publish("t", 1) == 0
        assert received == []


class TestAsyncHandlers:
    """Awaitable results are scheduled on the running loop."""

    async def test_coroutine_handler_is_scheduled(self, bus):
        received = []

        async def handler(payload):
            await asyncio.sleep(0)
            received.append(payload)

        bus.subscribe("t", handler)
        bus.publish("t", "async")
        await bus.drain()

        assert received == ["async"]

    async def test_failing_coroutine_handler_is_contained(self, bus):
        async def handler(payload):
            raise RuntimeError("async boom")

        bus.subscribe("t", handler)

        assert bus.publish("t", 1) == 1
        await bus.drain()

    def test_coroutine_handler_without_loop_is_dropped(self):
        bus = EventBus()

        async def handler(payload):
            return payload

        bus.subscribe("t", handler)

        assert bus.publish("t", 1) == 1
