"""Resilience error classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from resilience_sim.core.errors.base import ResilienceSimError

if TYPE_CHECKING:
    from resilience_sim.core.resilience.circuit_breaker import CircuitState


class CircuitBreakerError(ResilienceSimError):
    """Circuit breaker is open and rejecting requests.

    Raised in place of the wrapped operation's own error while the circuit
    is open, so the underlying cause is not visible to the caller.

    Attributes:
        breaker_name: Name of the circuit breaker.
        state: Current state of the breaker.
        retry_after_ms: Milliseconds until a trial call will be admitted.
    """

    retryable = False

    def __init__(
        self,
        message: str = "Circuit breaker is open",
        breaker_name: Optional[str] = None,
        state: Optional[CircuitState] = None,
        retry_after_ms: Optional[float] = None,
    ):
        super().__init__(message)
        self.breaker_name = breaker_name
        self.state = state
        self.retry_after_ms = retry_after_ms
