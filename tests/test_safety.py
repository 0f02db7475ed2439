"""Tests for execution/safety retries, timeouts and circuit breaking."""

import asyncio

import pytest

from execution.models import ToolTimeoutError
from execution.safety import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
    RetryStrategy,
    TimeoutHandler,
)


class TestRetryStrategy:
    """Backoff between attempts."""

    async def test_retries_until_success(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("refused")
            return "connected"

        strategy = RetryStrategy(max_attempts=3, initial_delay_seconds=0)

        assert await strategy.execute(flaky, key="A") == "connected"
        assert len(calls) == 3

    async def test_raises_last_error_when_attempts_run_out(self):
        calls = []

        async def down():
            calls.append(1)
            raise ConnectionError(f"refused {len(calls)}")

        strategy = RetryStrategy(max_attempts=2, initial_delay_seconds=0)

        with pytest.raises(ConnectionError, match="refused 2"):
            await strategy.execute(down)
        assert len(calls) == 2

    def test_delay_doubles_up_to_cap(self):
        strategy = RetryStrategy(
            max_attempts=5,
            initial_delay_seconds=1.0,
            max_delay_seconds=3.0,
            jitter=False,
        )

        assert [strategy.delay_for(n) for n in range(4)] == [1.0, 2.0, 3.0, 3.0]

    def test_jitter_stays_within_a_quarter(self):
        strategy = RetryStrategy(initial_delay_seconds=4.0)

        for _ in range(20):
            assert 3.0 <= strategy.delay_for(0) <= 5.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryStrategy(max_attempts=0)


class TestTimeoutHandler:
    """Time budgets."""

    async def test_returns_result_within_budget(self):
        async def quick():
            return 42

        assert await TimeoutHandler(timeout_seconds=1).run(quick()) == 42

    async def test_overrun_raises_timeout_error(self):
        handler = TimeoutHandler(timeout_seconds=0.01)

        with pytest.raises(ToolTimeoutError) as exc_info:
            await handler.run(asyncio.sleep(1), key="slow")

        assert exc_info.value.provider_name == "slow"
        assert exc_info.value.details["timeout_seconds"] == 0.01

    async def test_per_call_override(self):
        handler = TimeoutHandler(timeout_seconds=10)

        with pytest.raises(ToolTimeoutError) as exc_info:
            await handler.run(asyncio.sleep(1), timeout_seconds=0.01)

        assert exc_info.value.details["timeout_seconds"] == 0.01


class TestCircuitBreaker:
    """Opening, probing and closing."""

    def test_opens_at_threshold(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=2))

        breaker.record_failure("openai")
        assert breaker.allow("openai")

        breaker.record_failure("openai")
        assert breaker.state("openai") == CircuitState.OPEN
        assert not breaker.allow("openai")

    def test_success_resets_failure_count(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=2))

        breaker.record_failure("openai")
        breaker.record_success("openai")
        breaker.record_failure("openai")

        assert breaker.state("openai") == CircuitState.CLOSED

    def test_half_open_allows_a_single_probe(self):
        breaker = CircuitBreaker(
            CircuitBreakerConfig(failure_threshold=1, recovery_timeout_seconds=0)
        )
        breaker.record_failure("openai")

        assert breaker.allow("openai")
        assert breaker.state("openai") == CircuitState.HALF_OPEN
        assert not breaker.allow("openai")

        breaker.record_success("openai")
        assert breaker.state("openai") == CircuitState.CLOSED
        assert breaker.allow("openai")

    def test_failed_probe_opens_again(self):
        breaker = CircuitBreaker(
            CircuitBreakerConfig(failure_threshold=1, recovery_timeout_seconds=0)
        )
        breaker.record_failure("openai")
        assert breaker.allow("openai")

        breaker.record_failure("openai")

        assert breaker.state("openai") == CircuitState.OPEN

    def test_keys_are_independent(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=1))

        breaker.record_failure("openai")

        assert not breaker.allow("openai")
        assert breaker.allow("anthropic")
        assert set(breaker.get_status()) == {"openai", "anthropic"}

    def test_rejects_zero_threshold(self):
        with pytest.raises(ValueError):
            CircuitBreakerConfig(failure_threshold=0)
