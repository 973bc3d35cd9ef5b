"""Latency and failure simulation.

- Pattern and network-condition registry
- Error classification into the SimulationError taxonomy
- Seasonal load multiplier
- SimulationManager and its process-wide accessor
"""

from resilience_sim.core.simulation.classifier import (
    ERROR_MESSAGES,
    generate_simulation_error,
    is_retryable,
    to_simulation_error,
)
from resilience_sim.core.simulation.manager import (
    SimulationManager,
    UploadFile,
    get_simulation_manager,
    reset_simulation_manager_for_testing,
    set_simulation_manager,
)
from resilience_sim.core.simulation.models import (
    NetworkCondition,
    SimulationConfig,
    SimulationPattern,
    SleepFunc,
)
from resilience_sim.core.simulation.registry import (
    NETWORK_CONDITIONS,
    SIMULATION_PATTERNS,
    get_available_patterns,
    get_network_preset,
    get_pattern,
    pattern_bounds,
    register_pattern,
)
from resilience_sim.core.simulation.seasonal import (
    SEASONAL_MULTIPLIER_MAX,
    SEASONAL_MULTIPLIER_MIN,
    seasonal_multiplier,
)

__all__ = [
    # Models
    "NetworkCondition",
    "SimulationConfig",
    "SimulationPattern",
    "SleepFunc",
    "UploadFile",
    # Registry
    "SIMULATION_PATTERNS",
    "NETWORK_CONDITIONS",
    "get_pattern",
    "get_available_patterns",
    "get_network_preset",
    "pattern_bounds",
    "register_pattern",
    # Classifier
    "ERROR_MESSAGES",
    "generate_simulation_error",
    "is_retryable",
    "to_simulation_error",
    # Seasonal load
    "SEASONAL_MULTIPLIER_MIN",
    "SEASONAL_MULTIPLIER_MAX",
    "seasonal_multiplier",
    # Manager
    "SimulationManager",
    "get_simulation_manager",
    "set_simulation_manager",
    "reset_simulation_manager_for_testing",
]
