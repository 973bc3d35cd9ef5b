"""Entry point for the ``resilience-sim`` command."""

from pathlib import Path
from typing import Optional

import click

from resilience_sim import __version__
from resilience_sim.cli.commands import patterns_cmd, seasonal_cmd, simulate_cmd
from resilience_sim.config import SimulatorSettings, set_settings


@click.group("resilience-sim")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="TOML settings file (default: resilience-sim.toml if present).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level.",
)
@click.version_option(__version__, prog_name="resilience-sim")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], log_level: Optional[str]) -> None:
    """Simulate latency and failures and exercise retry and circuit breaking."""
    settings = SimulatorSettings.from_env(str(config_file) if config_file else None)
    if log_level:
        settings.log_level = log_level.upper()
    settings.setup_logging()
    set_settings(settings)
    ctx.obj = settings


cli.add_command(patterns_cmd)
cli.add_command(simulate_cmd)
cli.add_command(seasonal_cmd)


if __name__ == "__main__":
    cli()
