"""Shared fixtures for resilience-sim tests.

Every simulator is built with a seeded ``random.Random``, a recording
sleep function and a fixed wall clock, so no test waits on real time.
"""

import asyncio
import logging
import random
from datetime import datetime

import pytest

from resilience_sim.core.observability.monitor import (
    OperationMonitor,
    reset_operation_monitor_for_testing,
)
from resilience_sim.core.simulation.manager import (
    SimulationManager,
    reset_simulation_manager_for_testing,
)

# Wednesday 08:00: outside business hours, lunch and night, multiplier 1.0.
NEUTRAL_TIME = datetime(2024, 3, 6, 8, 0)


class FakeSleep:
    """Async sleep that records requested durations and yields once."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


class FixedRandom(random.Random):
    """Random whose ``random()`` always returns the same value."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


@pytest.fixture(autouse=True)
def _isolate_singletons():
    reset_simulation_manager_for_testing()
    reset_operation_monitor_for_testing()
    yield
    reset_simulation_manager_for_testing()
    reset_operation_monitor_for_testing()


@pytest.fixture(autouse=True)
def _restore_package_logger():
    package_logger = logging.getLogger("resilience_sim")
    level, handlers = package_logger.level, list(package_logger.handlers)
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_manager(fake_sleep):
    """Factory for managers with a recording sleep and a neutral clock."""

    def _make(rng=None, **overrides):
        manager = SimulationManager(
            rng=rng or random.Random(1234),
            sleep_func=fake_sleep,
            now_func=lambda: NEUTRAL_TIME,
        )
        if overrides:
            manager.set_config(**overrides)
        return manager

    return _make


@pytest.fixture
def manager(make_manager):
    return make_manager()


@pytest.fixture
def monitor(fake_clock):
    return OperationMonitor(clock=fake_clock, wall_clock=lambda: 1_700_000_000.0)
