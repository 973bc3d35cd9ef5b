"""Run simulated operations and report their metrics."""

import asyncio
import random
from collections import Counter
from typing import Any, Awaitable, Callable, Dict, Optional

import click

from resilience_sim.cli.output import emit_error, emit_success
from resilience_sim.config import SimulatorSettings
from resilience_sim.core.errors import ResilienceSimError, SimulationConfigError
from resilience_sim.core.observability.monitor import OperationMonitor
from resilience_sim.core.service import OperationOptions, SimulationService
from resilience_sim.core.simulation.manager import SimulationManager, UploadFile
from resilience_sim.core.simulation.models import NetworkCondition
from resilience_sim.core.simulation.registry import SIMULATION_PATTERNS

OPERATIONS: Dict[str, Callable[[SimulationManager], Callable[[], Awaitable[Any]]]] = {
    "api": lambda m: lambda: m.simulate_api_call(lambda: {"status": "ok"}),
    "upload": lambda m: lambda: m.simulate_file_upload(UploadFile("sample.bin", 1024 * 1024)),
    "processing": lambda m: lambda: m.simulate_processing(["validate", "transform", "load"]),
    "download": lambda m: lambda: m.simulate_download("pdf"),
    "auth": lambda m: lambda: m.simulate_auth("user@example.com", "secret"),
    "email": lambda m: lambda: m.simulate_email_send(),
}


async def _run(
    service: SimulationService,
    operation: Callable[[], Awaitable[Any]],
    options: OperationOptions,
    count: int,
) -> Dict[str, Any]:
    outcomes: Counter = Counter()
    for _ in range(count):
        try:
            await service.execute_operation(operation, options)
        except ResilienceSimError as e:
            outcomes[getattr(e, "type", None) or type(e).__name__] += 1
        else:
            outcomes["success"] += 1

    succeeded = outcomes.pop("success", 0)
    view = service.get_operation_metrics(options.operation_name)
    breaker = service.get_circuit_breaker_status(options.operation_name)
    return {
        "operation": options.operation_name,
        "count": count,
        "succeeded": succeeded,
        "failed": count - succeeded,
        "errors": {str(getattr(key, "value", key)): n for key, n in outcomes.items()},
        "metrics": view.to_dict() if view else None,
        "circuit_breaker": breaker.to_dict() if breaker else None,
        "simulator": service.manager.describe(),
    }


@click.command("simulate")
@click.argument("operation", type=click.Choice(sorted(OPERATIONS)))
@click.option("--pattern", type=click.Choice(list(SIMULATION_PATTERNS)), help="Latency pattern.")
@click.option(
    "--network",
    type=click.Choice([c.value for c in NetworkCondition]),
    help="Network condition overlaid on the pattern.",
)
@click.option("--error-rate", type=click.FloatRange(0.0, 1.0), help="Override the error rate.")
@click.option("--count", type=click.IntRange(min=1), default=10, show_default=True)
@click.option("--retry/--no-retry", default=True, show_default=True, help="Retry retryable failures.")
@click.option("--breaker", is_flag=True, help="Route calls through a circuit breaker.")
@click.option("--seed", type=int, help="Seed for reproducible runs.")
@click.option(
    "--delay-multiplier",
    type=click.FloatRange(0.1, 10.0),
    help="Scale every wait (0.1 is ten times faster).",
)
@click.pass_obj
def simulate_cmd(
    settings: Optional[SimulatorSettings],
    operation: str,
    pattern: Optional[str],
    network: Optional[str],
    error_rate: Optional[float],
    count: int,
    retry: bool,
    breaker: bool,
    seed: Optional[int],
    delay_multiplier: Optional[float],
) -> None:
    """Run OPERATION COUNT times and print success and timing metrics.

    Examples:
        resilience-sim simulate api --pattern instant --count 100
        resilience-sim simulate download --network unstable --breaker --seed 7
    """
    rng = random.Random(seed)
    manager = SimulationManager(rng=rng)
    try:
        (settings or SimulatorSettings()).apply(manager)
        if pattern:
            manager.set_pattern(pattern)
        if network:
            manager.set_network_condition(network)
        if error_rate is not None:
            manager.set_config(error_rate=error_rate)
    except SimulationConfigError as e:
        emit_error(
            str(e),
            code="INVALID_CONFIG",
            error_type="validation",
            details={"field": e.field, "value": e.value},
        )
    if delay_multiplier is not None:
        manager.delay_multiplier = delay_multiplier

    service = SimulationService(manager, monitor=OperationMonitor(), rng=rng)
    options = OperationOptions(
        operation_name=operation,
        use_retry=retry,
        use_circuit_breaker=breaker,
    )
    summary = asyncio.run(_run(service, OPERATIONS[operation](manager), options, count))
    emit_success(summary)
