# Resilience helpers
"""Timeout, retry and circuit breaker helpers"""
from .retries import RetryStrategy
from .timeout import TimeoutHandler
from .circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState

__all__ = [
    "RetryStrategy",
    "TimeoutHandler",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
]
