"""Simulation data models, enums, and protocols.

Defines the core types used across the simulation sub-package:
- NetworkCondition enum for network presets
- SimulationPattern, an immutable latency/error-rate preset
- SimulationConfig, the validated delay bounds and error rate in effect
- SleepFunc protocol for injectable async sleep
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NetworkCondition(str, Enum):
    """Named network presets layered on top of a pattern."""

    FAST = "fast"
    SLOW = "slow"
    UNSTABLE = "unstable"


class SimulationPattern(BaseModel):
    """Named latency/error-rate preset."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Registry key, e.g. 'normal'")
    name: str = Field(description="Display name")
    base_delay_ms: float = Field(ge=0, description="Nominal delay in milliseconds")
    variability: float = Field(ge=0, description="Multiplier widening the delay range")
    error_rate: float = Field(ge=0, le=1, description="Probability of an injected failure")
    description: str = ""


class SimulationConfig(BaseModel):
    """Delay bounds and error rate read by every simulated operation."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    min_delay_ms: float = Field(default=500, ge=0)
    max_delay_ms: float = Field(default=2000, ge=0)
    error_rate: float = Field(default=0.02, ge=0, le=1)
    network_condition: NetworkCondition = NetworkCondition.FAST

    @model_validator(mode="after")
    def validate_delay_ordering(self) -> "SimulationConfig":
        """Assert min_delay_ms <= max_delay_ms."""
        if self.min_delay_ms > self.max_delay_ms:
            raise ValueError(
                f"min_delay_ms ({self.min_delay_ms}) must not exceed "
                f"max_delay_ms ({self.max_delay_ms})"
            )
        return self


class SleepFunc(Protocol):
    """Protocol for injectable sleep function (seconds, like asyncio.sleep)."""

    async def __call__(self, seconds: float) -> None: ...
