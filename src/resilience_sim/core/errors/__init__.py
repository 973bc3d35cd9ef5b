"""Unified error hierarchy for resilience-sim.

Usage:
    from resilience_sim.core.errors import SimulationError, ErrorType

    try:
        await manager.simulate_download("pdf")
    except SimulationError as e:
        if e.retryable:
            ...
"""

from resilience_sim.core.errors.base import ResilienceSimError, SimulationConfigError
from resilience_sim.core.errors.resilience import CircuitBreakerError
from resilience_sim.core.errors.simulation import (
    NON_RETRYABLE_TYPES,
    RETRYABLE_TYPES,
    ErrorType,
    SimulationError,
)

__all__ = [
    "ResilienceSimError",
    "SimulationConfigError",
    "CircuitBreakerError",
    "ErrorType",
    "SimulationError",
    "RETRYABLE_TYPES",
    "NON_RETRYABLE_TYPES",
]
