"""Async retry with backoff and jitter.

Re-runs a failed operation while its error is classified as retryable,
waiting ``min(base x multiplier^(attempt-1), max)`` scaled by a jitter
factor in [0.5, 1.0] between attempts.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, FrozenSet, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from resilience_sim.core.errors.base import SimulationConfigError
from resilience_sim.core.errors.simulation import RETRYABLE_TYPES, ErrorType
from resilience_sim.core.observability.audit import audit_log, get_audit_logger
from resilience_sim.core.simulation.classifier import is_retryable
from resilience_sim.core.simulation.models import SleepFunc

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_MIN = 0.5
JITTER_MAX = 1.0


class RetryConfig(BaseModel):
    """Bounded retry configuration, created per call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, ge=1, description="Total attempts, including the first")
    base_delay_ms: float = Field(default=1000, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    max_delay_ms: float = Field(default=10000, ge=0)
    retryable_errors: FrozenSet[ErrorType] = Field(
        default=RETRYABLE_TYPES,
        description="Error types eligible for retry",
    )

    @classmethod
    def build(cls, **values: object) -> "RetryConfig":
        """Construct a config, reporting invalid values as ``SimulationConfigError``."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise SimulationConfigError(f"Invalid retry config: {e}") from e

    def backoff_ms(self, attempt: int) -> float:
        """Nominal (pre-jitter) wait after ``attempt`` failed."""
        return min(self.base_delay_ms * self.backoff_multiplier ** (attempt - 1), self.max_delay_ms)

    def should_retry(self, exc: BaseException) -> bool:
        """Retry only errors that declare ``retryable is True``.

        Errors that also carry a ``type`` must be listed in ``retryable_errors``.
        """
        if not is_retryable(exc):
            return False
        error_type = getattr(exc, "type", None)
        if error_type is None:
            return True
        try:
            return ErrorType(error_type) in self.retryable_errors
        except ValueError:
            return False


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    rng: Optional[random.Random] = None,
    sleep_func: Optional[SleepFunc] = None,
) -> T:
    """Run ``operation`` with bounded retries.

    Args:
        operation: Async function to retry (no arguments; use lambda for args).
        config: Retry configuration (default: 3 attempts, exponential).
        rng: Injectable Random instance for deterministic testing.
        sleep_func: Injectable sleep function for time control in tests.

    Returns:
        Result from the operation on success.

    Raises:
        Exception: The error of the final attempt, or the first
            non-retryable error, unchanged.

    Example:
        >>> result = await with_retry(
        ...     lambda: manager.simulate_download("pdf"),
        ...     RetryConfig(max_attempts=5),
        ... )
    """
    retry_config = config or RetryConfig()
    _rng = rng or random.Random()
    _sleep = sleep_func or asyncio.sleep

    for attempt in range(1, retry_config.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if not retry_config.should_retry(e):
                raise
            if attempt == retry_config.max_attempts:
                get_audit_logger().retry_exhausted(attempt, e)
                raise

            jitter = JITTER_MIN + _rng.random() * (JITTER_MAX - JITTER_MIN)
            delay_ms = retry_config.backoff_ms(attempt) * jitter
            logger.debug(
                "Attempt %d/%d failed (%s); retrying in %.0fms",
                attempt,
                retry_config.max_attempts,
                e,
                delay_ms,
            )
            audit_log("retry_attempt", attempt=attempt, delay_ms=round(delay_ms), error=str(e))
            await _sleep(delay_ms / 1000.0)

    raise RuntimeError("with_retry: unexpected state")


async def with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    **kwargs,
) -> T:
    """Retry with the default doubling backoff."""
    return await with_retry(operation, RetryConfig.build(max_attempts=max_attempts), **kwargs)


async def with_linear_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay_ms: float = 1000,
    **kwargs,
) -> T:
    """Retry with a constant nominal wait of ``delay_ms``."""
    config = RetryConfig.build(
        max_attempts=max_attempts,
        base_delay_ms=delay_ms,
        backoff_multiplier=1.0,
    )
    return await with_retry(operation, config, **kwargs)
