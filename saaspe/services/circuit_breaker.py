"""
CircuitBreaker - Stops calling a backend that keeps failing.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Backend is failing, requests are rejected without a network call
- HALF_OPEN: One probe request is admitted to test recovery

Transitions:
- CLOSED → OPEN: When failure_threshold consecutive failures are recorded
- OPEN → HALF_OPEN: On the first admission check after reset_timeout
- HALF_OPEN → CLOSED: On a successful probe
- HALF_OPEN → OPEN: On a failed probe
- HALF_OPEN: A trial call silent for reset_timeout is replaced by a new one

Only server errors (status >= 500) count as failures. The client reports
4xx responses as successes and reports nothing for network errors.

State is mutated synchronously from each call's completion on the event
loop thread. Sharing one breaker across OS threads needs a lock around
allow_request/record_*.
"""

import time
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Callable

from loguru import logger


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Blocking requests
    HALF_OPEN = "HALF_OPEN"  # Testing recovery


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    failure_threshold: int = 5  # Consecutive failures before opening
    reset_timeout: timedelta = timedelta(seconds=30)  # Time before half-open
    half_open_max_requests: int = 1  # Probes allowed in half-open state


class CircuitBreaker:
    """
    Circuit breaker for a single backend.

    One instance per base URL, owned by the ApiClient that talks to it.

    Usage:
        cb = CircuitBreaker("api")

        if not cb.allow_request():
            raise CircuitOpenError(...)

        response = await send()
        if response.status_code >= 500:
            cb.record_failure()
        else:
            cb.record_success()
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: float | None = None
        self._half_open_requests = 0
        self._trial_admitted_at: float | None = None

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _reset_timeout_elapsed(self) -> bool:
        if self._last_failure_time is None:
            return True
        elapsed = self._clock() - self._last_failure_time
        return elapsed >= self.config.reset_timeout.total_seconds()

    def allow_request(self) -> bool:
        """
        Admission check, called once per outgoing request.

        In OPEN state this is where the reset timeout is evaluated: the
        first check after it elapses moves the circuit to HALF_OPEN and
        takes the probe slot.
        """
        if self._state == CircuitState.CLOSED:
            return True

        if self._state == CircuitState.OPEN:
            if not self._reset_timeout_elapsed():
                return False
            self._state = CircuitState.HALF_OPEN
            self._half_open_requests = 0
            logger.info(f"Circuit breaker '{self.name}' transitioned to HALF_OPEN")

        # HALF_OPEN: admit a limited number of probes
        if self._half_open_requests >= self.config.half_open_max_requests:
            if not self._trial_expired():
                return False
            # Admitted calls never reported back; start over
            self._half_open_requests = 0
        self._half_open_requests += 1
        self._trial_admitted_at = self._clock()
        return True

    def _trial_expired(self) -> bool:
        if self._trial_admitted_at is None:
            return True
        elapsed = self._clock() - self._trial_admitted_at
        return elapsed >= self.config.reset_timeout.total_seconds()

    def record_success(self) -> None:
        """Record a response from a healthy backend."""
        if self._state != CircuitState.CLOSED:
            self._close()
        self._failure_count = 0

    def record_failure(self) -> None:
        """Record a server error."""
        self._failure_count += 1
        self._last_failure_time = self._clock()

        if self._state == CircuitState.HALF_OPEN:
            # A failed probe reopens the circuit
            self._open()
        elif self._state == CircuitState.CLOSED:
            if self._failure_count >= self.config.failure_threshold:
                self._open()

    def release_probe(self) -> None:
        """Give back a half-open probe slot whose call got no response."""
        if self._state == CircuitState.HALF_OPEN and self._half_open_requests > 0:
            self._half_open_requests -= 1

    def _open(self) -> None:
        """Transition to OPEN state."""
        self._state = CircuitState.OPEN
        self._half_open_requests = 0
        logger.warning(
            f"Circuit breaker '{self.name}' OPENED after {self._failure_count} failures"
        )

    def _close(self) -> None:
        """Transition to CLOSED state."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._half_open_requests = 0
        logger.info(f"Circuit breaker '{self.name}' CLOSED (recovered)")

    def reset(self) -> None:
        """Manually reset the circuit breaker."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._half_open_requests = 0
        self._last_failure_time = None
        logger.info(f"Circuit breaker '{self.name}' manually reset")

    def get_time_until_reset(self) -> float | None:
        """Get seconds until an OPEN circuit admits a probe."""
        if self._state != CircuitState.OPEN or self._last_failure_time is None:
            return None

        reset_at = self._last_failure_time + self.config.reset_timeout.total_seconds()
        return max(0.0, reset_at - self._clock())

    def get_status(self) -> dict[str, Any]:
        """Get current status as dictionary."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "time_until_reset": self.get_time_until_reset(),
        }
