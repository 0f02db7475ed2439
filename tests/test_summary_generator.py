"""Tests for summary/generator.py and summary/stream.py."""

import asyncio
import json

import pytest

from events import summary_topic
from execution.models import ExecutionReport, SummaryState, SummaryUpstreamError
from summary import SummaryEventKind, SummaryGenerator, SummaryStream

from tests.conftest import FakeTextGenerator, wait_for_terminal


class TestSummarize:
    """Starting and pumping summaries."""

    async def test_tokens_arrive_in_order_then_done(self, bus, summarizer, sample_report):
        stream = await summarizer.summarize(sample_report)
        events = []
        stream.attach(events.append)

        await wait_for_terminal(stream)

        assert [e.index for e in events] == list(range(len(events)))
        assert [e.kind for e in events[:-1]] == [SummaryEventKind.TOKEN] * 4
        assert events[-1].kind == SummaryEventKind.DONE
        assert stream.state == SummaryState.COMPLETED
        assert stream.text == "".join(e.text for e in events[:-1])

    async def test_tokens_are_published_on_summary_topic(self, bus, summarizer, sample_report):
        stream = await summarizer.summarize(sample_report)
        published = []
        bus.subscribe(summary_topic(stream.correlation_id), published.append)

        await wait_for_terminal(stream)

        assert published
        assert published[-1].kind == SummaryEventKind.DONE

    async def test_each_call_gets_new_correlation_id(self, summarizer, sample_report):
        first = await summarizer.summarize(sample_report)
        second = await summarizer.summarize(sample_report)

        assert first.correlation_id != second.correlation_id
        assert summarizer.get(first.correlation_id) is first

    async def test_failure_mid_stream_ends_with_error(self, bus, sample_report):
        generator = SummaryGenerator(bus, FakeTextGenerator(tokens=["a", "b", "c"], fail_after=2))

        stream = await generator.summarize(sample_report)
        await wait_for_terminal(stream)

        events = stream.snapshot()
        assert [e.kind for e in events] == [
            SummaryEventKind.TOKEN,
            SummaryEventKind.TOKEN,
            SummaryEventKind.ERROR,
        ]
        assert stream.state == SummaryState.FAILED
        assert stream.text == "ab"
        assert "connection reset" in stream.error

    async def test_start_failure_registers_nothing(self, bus, sample_report):
        generator = SummaryGenerator(bus, FakeTextGenerator(fail_start=True))

        with pytest.raises(SummaryUpstreamError):
            await generator.summarize(sample_report)

        assert generator.streams() == []

    async def test_start_timeout(self, bus, sample_report):
        class SlowGenerator(FakeTextGenerator):
            async def stream(self, messages, config=None):
                await asyncio.sleep(1)
                return self._iterate()

        generator = SummaryGenerator(bus, SlowGenerator(), start_timeout_seconds=0.05)

        with pytest.raises(SummaryUpstreamError):
            await generator.summarize(sample_report)

    async def test_aclose_cancels_running_summaries(self, bus, sample_report):
        generator = SummaryGenerator(bus, FakeTextGenerator(gate=asyncio.Event()))
        stream = await generator.summarize(sample_report)

        await generator.aclose()

        assert stream.state == SummaryState.FAILED
        assert stream.error == "summary cancelled"

    async def test_oldest_finished_streams_are_evicted(self, bus, sample_report):
        generator = SummaryGenerator(bus, FakeTextGenerator(), max_retained=1)

        first = await generator.summarize(sample_report)
        await wait_for_terminal(first)
        second = await generator.summarize(sample_report)
        await wait_for_terminal(second)

        assert generator.get(first.correlation_id) is None
        assert generator.get(second.correlation_id) is second


class TestPrompt:
    """Messages sent to the text generator."""

    async def test_prompt_contains_results_without_content(self, bus, text_generator, summarizer, sample_report):
        await summarizer.summarize(sample_report)

        system, user = text_generator.requests[0]
        payload = json.loads(user.content)

        assert system.role == "system"
        assert "markdown" in system.content
        assert payload["statistics"]["total"] == 2
        assert payload["statistics"]["byType"] == {"create": 1, "shell": 1}
        assert payload["actions"][1]["error"] == "exit code 1"
        assert "content" not in payload["actions"][0]

    async def test_successful_messages_dropped_over_budget(self, bus, sample_report):
        text_generator = FakeTextGenerator()
        generator = SummaryGenerator(bus, text_generator, max_prompt_tokens=10)

        stream = await generator.summarize(sample_report)
        await wait_for_terminal(stream)

        payload = json.loads(text_generator.requests[0][1].content)
        assert payload["actions"][0]["message"] is None
        assert payload["actions"][1]["message"] == "Command failed"


class TestSummaryStream:
    """Buffering and late attachment."""

    def make_stream(self, bus) -> SummaryStream:
        report = ExecutionReport(project_root="/tmp/p", success=True, timestamp=0)
        return SummaryStream("abc", report, bus)

    def test_late_attach_replays_then_receives_live(self, bus):
        stream = self.make_stream(bus)
        stream.append("one ")
        stream.append("two ")

        events = []
        subscription = stream.attach(events.append)
        stream.append("three")
        stream.complete()

        assert [e.index for e in events] == [0, 1, 2, 3]
        assert [e.text for e in events[:3]] == ["one ", "two ", "three"]
        assert events[3].kind == SummaryEventKind.DONE
        assert subscription.active

    def test_attach_after_completion_replays_everything(self, bus):
        stream = self.make_stream(bus)
        stream.append("only")
        stream.complete()

        events = []
        subscription = stream.attach(events.append)

        assert [e.kind for e in events] == [SummaryEventKind.TOKEN, SummaryEventKind.DONE]
        assert not subscription.active

    def test_terminal_state_is_final(self, bus):
        stream = self.make_stream(bus)
        stream.complete()
        stream.fail("late error")
        stream.append("late token")

        assert stream.state == SummaryState.COMPLETED
        assert stream.text == ""
        assert len(stream.snapshot()) == 1

    async def test_events_iterator_ends_after_terminal(self, bus):
        stream = self.make_stream(bus)
        stream.append("a")

        async def produce():
            await asyncio.sleep(0)
            stream.append("b")
            stream.complete()

        producer = asyncio.create_task(produce())
        collected = [event async for event in stream.events()]
        await producer

        assert [e.kind.value for e in collected] == ["token", "token", "done"]
        assert bus.subscriber_count(stream.topic) == 0

    def test_to_dict(self, bus):
        stream = self.make_stream(bus)
        stream.append("hello")

        assert stream.to_dict() == {
            "summaryId": "abc",
            "state": "streaming",
            "text": "hello",
            "error": None,
        }
