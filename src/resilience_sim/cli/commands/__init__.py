"""CLI commands."""

from resilience_sim.cli.commands.patterns import patterns_cmd
from resilience_sim.cli.commands.seasonal import seasonal_cmd
from resilience_sim.cli.commands.simulate import simulate_cmd

__all__ = [
    "patterns_cmd",
    "seasonal_cmd",
    "simulate_cmd",
]
