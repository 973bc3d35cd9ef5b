"""List the simulation pattern and network condition catalogs."""

import click

from resilience_sim.cli.output import emit_success
from resilience_sim.core.simulation.registry import (
    NETWORK_CONDITIONS,
    get_available_patterns,
    pattern_bounds,
)


@click.command("patterns")
def patterns_cmd() -> None:
    """Show every pattern with its effective delay bounds.

    Examples:
        resilience-sim patterns
    """
    patterns = []
    for key, pattern in get_available_patterns().items():
        min_delay, max_delay = pattern_bounds(pattern)
        patterns.append(
            {
                "key": key,
                "name": pattern.name,
                "base_delay_ms": pattern.base_delay_ms,
                "variability": pattern.variability,
                "error_rate": pattern.error_rate,
                "min_delay_ms": min_delay,
                "max_delay_ms": max_delay,
                "description": pattern.description,
            }
        )

    emit_success(
        {
            "patterns": patterns,
            "network_conditions": {
                condition.value: dict(preset) for condition, preset in NETWORK_CONDITIONS.items()
            },
        }
    )
