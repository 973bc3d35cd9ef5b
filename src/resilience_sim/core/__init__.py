"""Core simulation, resilience and monitoring operations for resilience-sim."""

from resilience_sim.core.progress import ProgressSimulator
from resilience_sim.core.service import (
    OperationMessages,
    OperationOptions,
    SimulationService,
)

__all__ = [
    "ProgressSimulator",
    "OperationMessages",
    "OperationOptions",
    "SimulationService",
]
