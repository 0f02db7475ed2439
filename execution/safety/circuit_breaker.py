# Circuit breaker for upstream providers
"""Per-key circuit breaker with a half-open recovery probe"""
from typing import Dict, Optional
from datetime import datetime
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states"""
    CLOSED = "closed"  # calls allowed
    OPEN = "open"  # calls skipped until the recovery timeout passes
    HALF_OPEN = "half_open"  # one probe call allowed


class CircuitBreakerConfig:
    """Circuit breaker configuration"""

    def __init__(
        self,
        failure_threshold: int = 3,
        recovery_timeout_seconds: float = 30,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.failure_threshold = failure_threshold
        self.recovery_timeout_seconds = recovery_timeout_seconds


class CircuitBreakerState:
    """State for a single key"""

    def __init__(self, config: CircuitBreakerConfig):
        self.config = config
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at: Optional[datetime] = None
        self.probing = False

    def allow(self) -> bool:
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            elapsed = (datetime.utcnow() - self.opened_at).total_seconds()
            if elapsed < self.config.recovery_timeout_seconds:
                return False
            self.state = CircuitState.HALF_OPEN
            self.probing = False

        # half-open: a single probe at a time
        if self.probing:
            return False
        self.probing = True
        return True

    def record_success(self):
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.opened_at = None
        self.probing = False

    def record_failure(self):
        if self.state == CircuitState.HALF_OPEN:
            self._open()
            return

        self.failure_count += 1
        if self.failure_count >= self.config.failure_threshold:
            self._open()

    def _open(self):
        self.state = CircuitState.OPEN
        self.opened_at = datetime.utcnow()
        self.probing = False

    def get_status(self) -> Dict:
        return {
            "state": self.state.value,
            "failures": self.failure_count,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
        }


class CircuitBreaker:
    """
    Circuit breakers keyed by name.

    After ``failure_threshold`` consecutive failures a key is skipped.
    Once ``recovery_timeout_seconds`` have passed one probe call goes
    through: success closes the circuit, failure opens it again.
    """

    def __init__(self, config: Optional[CircuitBreakerConfig] = None):
        self.config = config or CircuitBreakerConfig()
        self._breakers: Dict[str, CircuitBreakerState] = {}

    def _get_breaker(self, key: str) -> CircuitBreakerState:
        if key not in self._breakers:
            self._breakers[key] = CircuitBreakerState(self.config)
        return self._breakers[key]

    def allow(self, key: str) -> bool:
        """Whether a call for key may go through now"""
        return self._get_breaker(key).allow()

    def record_success(self, key: str):
        breaker = self._get_breaker(key)
        if breaker.state != CircuitState.CLOSED:
            logger.info(f"Circuit for {key} closed")
        breaker.record_success()

    def record_failure(self, key: str):
        breaker = self._get_breaker(key)
        breaker.record_failure()
        if breaker.state == CircuitState.OPEN:
            logger.warning(
                f"Circuit for {key} open; retrying after "
                f"{self.config.recovery_timeout_seconds}s"
            )

    def state(self, key: str) -> CircuitState:
        return self._get_breaker(key).state

    def get_status(self) -> Dict[str, Dict]:
        return {
            name: breaker.get_status()
            for name, breaker in self._breakers.items()
        }
