"""Circuit breaker pattern implementation.

This module provides:
- CircuitState: Enum for circuit states (closed, open, half_open)
- CircuitBreakerSnapshot: Point-in-time view of a breaker
- CircuitBreaker: Per-call-site breaker with an async ``execute``
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from resilience_sim.core.errors.resilience import CircuitBreakerError
from resilience_sim.core.observability.audit import audit_log, get_audit_logger

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_THRESHOLD = 5
DEFAULT_TIMEOUT_MS = 60000.0
DEFAULT_RESET_TIMEOUT_MS = 30000.0


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerSnapshot:
    """State of a breaker at one instant."""

    state: CircuitState
    failures: int
    last_failure_time: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "failures": self.failures,
            "last_failure_time": self.last_failure_time,
        }


@dataclass
class CircuitBreaker:
    """Circuit breaker guarding one logical call site.

    - closed: calls pass through; ``threshold`` consecutive failures open it.
    - open: calls are rejected with ``CircuitBreakerError`` without invoking
      the operation until ``reset_timeout_ms`` has elapsed since the last
      failure, at which point the breaker moves to half-open.
    - half_open: one trial call is admitted. Success closes the circuit,
      failure re-opens it.

    ``timeout_ms`` is carried for configuration compatibility and is not
    consulted by any transition.
    """

    threshold: int = DEFAULT_THRESHOLD
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    reset_timeout_ms: float = DEFAULT_RESET_TIMEOUT_MS
    name: str = "default"
    clock: Callable[[], float] = field(default=_monotonic_ms, repr=False)
    on_state_change: Optional[Callable[[CircuitState], None]] = field(default=None, repr=False)

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failures: int = field(default=0, init=False)
    _last_failure_time: float = field(default=0.0, init=False)
    _trial_in_flight: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if self.threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {self.threshold}")

    @property
    def state(self) -> CircuitState:
        """Get the current circuit state."""
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def last_failure_time(self) -> float:
        return self._last_failure_time

    def _transition(self, new_state: CircuitState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        logger.info(
            "Circuit breaker %s: %s -> %s (failures=%d)",
            self.name,
            old_state.value,
            new_state.value,
            self._failures,
        )
        get_audit_logger().circuit_state_change(
            self.name, old_state.value, new_state.value, self._failures
        )
        if self.on_state_change:
            try:
                self.on_state_change(new_state)
            except Exception as e:
                logger.debug("Callback failed during state change to %s: %s", new_state, e)

    def _reject(self, now: float) -> CircuitBreakerError:
        retry_after = max(0.0, self.reset_timeout_ms - (now - self._last_failure_time))
        audit_log("circuit_rejected", subject=self.name, state=self._state.value)
        return CircuitBreakerError(
            "Circuit breaker is open",
            breaker_name=self.name,
            state=self._state,
            retry_after_ms=retry_after,
        )

    def _admit(self) -> bool:
        """Decide whether a call may run; returns True for a half-open trial."""
        now = self.clock()
        if self._state == CircuitState.OPEN:
            if now - self._last_failure_time > self.reset_timeout_ms:
                self._transition(CircuitState.HALF_OPEN)
            else:
                raise self._reject(now)
        if self._state == CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                raise self._reject(now)
            self._trial_in_flight = True
            return True
        return False

    def record_success(self) -> None:
        """Record a successful call."""
        self._failures = 0
        self._transition(CircuitState.CLOSED)

    def record_failure(self) -> None:
        """Record a failed call."""
        self._failures += 1
        self._last_failure_time = self.clock()
        if self._state == CircuitState.HALF_OPEN or self._failures >= self.threshold:
            self._transition(CircuitState.OPEN)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` through the breaker.

        Returns the operation's result, or re-raises its error unchanged.

        Raises:
            CircuitBreakerError: If the circuit is open (or a half-open
                trial is already running); the operation is not invoked.
        """
        trial = self._admit()
        try:
            result = await operation()
        except Exception:
            self.record_failure()
            raise
        else:
            self.record_success()
            return result
        finally:
            if trial:
                self._trial_in_flight = False

    def get_state(self) -> CircuitBreakerSnapshot:
        return CircuitBreakerSnapshot(
            state=self._state,
            failures=self._failures,
            last_failure_time=self._last_failure_time,
        )

    def reset(self) -> None:
        """Return to closed with no recorded failures."""
        self._failures = 0
        self._last_failure_time = 0.0
        self._trial_in_flight = False
        self._transition(CircuitState.CLOSED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization.

        Note: clock and on_state_change are not serialized.
        """
        return {
            "name": self.name,
            "threshold": self.threshold,
            "timeout_ms": self.timeout_ms,
            "reset_timeout_ms": self.reset_timeout_ms,
            **self.get_state().to_dict(),
        }


__all__ = [
    "CircuitState",
    "CircuitBreaker",
    "CircuitBreakerSnapshot",
]
