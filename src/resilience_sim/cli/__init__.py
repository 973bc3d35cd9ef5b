"""Command-line interface for resilience-sim."""

from resilience_sim.cli.main import cli

__all__ = ["cli"]
