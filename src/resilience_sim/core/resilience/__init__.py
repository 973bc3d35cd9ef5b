"""Resilience patterns: retry with backoff and circuit breaking.

- RetryConfig, with_retry: bounded retries honoring ``retryable``
- with_exponential_backoff / with_linear_backoff: named presets
- CircuitBreaker, CircuitState: per-call-site load shedding
"""

from resilience_sim.core.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerSnapshot,
    CircuitState,
)
from resilience_sim.core.resilience.retry import (
    RetryConfig,
    with_exponential_backoff,
    with_linear_backoff,
    with_retry,
)

__all__ = [
    # Retry
    "RetryConfig",
    "with_retry",
    "with_exponential_backoff",
    "with_linear_backoff",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerSnapshot",
    "CircuitState",
]
