"""Built-in pattern catalog and network condition presets.

Maps pattern keys to ``SimulationPattern`` instances and network
conditions to delay/error-rate overlays, with lookup helpers that reject
unknown names.
"""

from __future__ import annotations

from typing import Dict, Mapping, Tuple, Union

from resilience_sim.core.errors.base import SimulationConfigError
from resilience_sim.core.simulation.models import NetworkCondition, SimulationPattern

SIMULATION_PATTERNS: Dict[str, SimulationPattern] = {
    "instant": SimulationPattern(
        key="instant",
        name="Instant",
        base_delay_ms=100,
        variability=0.2,
        error_rate=0.001,
        description="Very fast local operations",
    ),
    "fast": SimulationPattern(
        key="fast",
        name="Fast",
        base_delay_ms=300,
        variability=0.5,
        error_rate=0.01,
        description="Fast network operations",
    ),
    "normal": SimulationPattern(
        key="normal",
        name="Normal",
        base_delay_ms=800,
        variability=0.8,
        error_rate=0.02,
        description="Typical API operations",
    ),
    "slow": SimulationPattern(
        key="slow",
        name="Slow",
        base_delay_ms=2000,
        variability=1.2,
        error_rate=0.05,
        description="Complex operations or a slow network",
    ),
    "heavy": SimulationPattern(
        key="heavy",
        name="Heavy",
        base_delay_ms=5000,
        variability=2.0,
        error_rate=0.08,
        description="Intensive processing",
    ),
}

DEFAULT_PATTERN = "normal"

# (min_delay_ms, max_delay_ms, error_rate)
NETWORK_CONDITIONS: Dict[NetworkCondition, Dict[str, float]] = {
    NetworkCondition.FAST: {"min_delay_ms": 200, "max_delay_ms": 800, "error_rate": 0.01},
    NetworkCondition.SLOW: {"min_delay_ms": 1000, "max_delay_ms": 3000, "error_rate": 0.05},
    NetworkCondition.UNSTABLE: {"min_delay_ms": 500, "max_delay_ms": 5000, "error_rate": 0.1},
}


def get_pattern(name: str) -> SimulationPattern:
    """Look up a pattern by key.

    Raises:
        SimulationConfigError: If no pattern is registered under ``name``.
    """
    pattern = SIMULATION_PATTERNS.get(name)
    if pattern is None:
        raise SimulationConfigError(
            f"Unknown simulation pattern '{name}'. Valid options: {', '.join(SIMULATION_PATTERNS)}",
            field="pattern",
            value=name,
        )
    return pattern


def get_available_patterns() -> Dict[str, SimulationPattern]:
    """Return a copy of the pattern catalog."""
    return dict(SIMULATION_PATTERNS)


def register_pattern(pattern: SimulationPattern, *, replace: bool = False) -> None:
    """Add a pattern to the catalog.

    Built-in keys can only be overwritten with ``replace=True``.
    """
    if pattern.key in SIMULATION_PATTERNS and not replace:
        raise SimulationConfigError(
            f"Pattern '{pattern.key}' is already registered",
            field="pattern",
            value=pattern.key,
        )
    SIMULATION_PATTERNS[pattern.key] = pattern


def parse_network_condition(value: Union[str, NetworkCondition]) -> NetworkCondition:
    """Coerce a condition name into ``NetworkCondition``."""
    try:
        return NetworkCondition(value)
    except ValueError:
        raise SimulationConfigError(
            f"Unknown network condition '{value}'. "
            f"Valid options: {', '.join(c.value for c in NetworkCondition)}",
            field="network_condition",
            value=value,
        ) from None


def get_network_preset(condition: Union[str, NetworkCondition]) -> Mapping[str, float]:
    """Return the delay/error-rate overlay for a network condition."""
    return dict(NETWORK_CONDITIONS[parse_network_condition(condition)])


def pattern_bounds(pattern: SimulationPattern) -> Tuple[float, float]:
    """Delay range implied by a pattern: ``[0.5 x base, base x (1 + variability)]``."""
    return (
        pattern.base_delay_ms * 0.5,
        pattern.base_delay_ms * (1 + pattern.variability),
    )
