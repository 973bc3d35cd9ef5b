"""resilience-sim: latency and failure simulation with retry and circuit breaking."""

from resilience_sim.core.errors import (
    CircuitBreakerError,
    ErrorType,
    ResilienceSimError,
    SimulationConfigError,
    SimulationError,
)
from resilience_sim.core.observability import OperationMonitor, get_operation_monitor
from resilience_sim.core.progress import ProgressSimulator
from resilience_sim.core.resilience import (
    CircuitBreaker,
    CircuitState,
    RetryConfig,
    with_exponential_backoff,
    with_linear_backoff,
    with_retry,
)
from resilience_sim.core.service import OperationOptions, SimulationService
from resilience_sim.core.simulation import (
    NetworkCondition,
    SimulationConfig,
    SimulationManager,
    SimulationPattern,
    get_simulation_manager,
    to_simulation_error,
)

__version__ = "0.3.0"

__all__ = [
    "__version__",
    # Errors
    "CircuitBreakerError",
    "ErrorType",
    "ResilienceSimError",
    "SimulationConfigError",
    "SimulationError",
    # Simulation
    "NetworkCondition",
    "SimulationConfig",
    "SimulationManager",
    "SimulationPattern",
    "get_simulation_manager",
    "to_simulation_error",
    # Resilience
    "CircuitBreaker",
    "CircuitState",
    "RetryConfig",
    "with_retry",
    "with_exponential_backoff",
    "with_linear_backoff",
    # Monitoring and progress
    "OperationMonitor",
    "get_operation_monitor",
    "ProgressSimulator",
    # Facade
    "OperationOptions",
    "SimulationService",
]
