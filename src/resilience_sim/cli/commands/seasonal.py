"""Show the time-of-day load multiplier."""

from datetime import datetime
from typing import Optional

import click

from resilience_sim.cli.output import emit_success
from resilience_sim.core.simulation.seasonal import (
    SEASONAL_MULTIPLIER_MAX,
    SEASONAL_MULTIPLIER_MIN,
    seasonal_multiplier,
)


@click.command("seasonal")
@click.option(
    "--at",
    "at",
    type=click.DateTime(),
    help="Evaluate at this local time instead of now.",
)
def seasonal_cmd(at: Optional[datetime]) -> None:
    """Print the load multiplier applied to simulated delays.

    Examples:
        resilience-sim seasonal
        resilience-sim seasonal --at "2024-03-06 12:30:00"
    """
    moment = at or datetime.now()
    emit_success(
        {
            "timestamp": moment.isoformat(),
            "multiplier": seasonal_multiplier(moment),
            "range": [SEASONAL_MULTIPLIER_MIN, SEASONAL_MULTIPLIER_MAX],
        }
    )
