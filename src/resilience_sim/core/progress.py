"""Timer-driven progress reporting.

``ProgressSimulator`` advances a value to 100 in fixed increments on
an asyncio task owned by the simulator. ``stop()`` cancels the task and
only halts further ticks; progress already reported is not rolled back.

Example:
    progress = ProgressSimulator(bar.update, duration_ms=2000)
    progress.start()
    await progress.wait()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from resilience_sim.core.simulation.models import SleepFunc

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 3000.0
DEFAULT_STEPS = 50
_COMPLETION_TOLERANCE = 1e-9


class ProgressSimulator:
    """Emit ``round(progress)`` to ``on_progress`` once per tick.

    Args:
        on_progress: Callback receiving an integer percentage.
        duration_ms: Time from 0 to 100.
        steps: Number of ticks, spaced ``duration_ms / steps`` apart.
        sleep_func: Injectable async sleep taking seconds.
    """

    def __init__(
        self,
        on_progress: Callable[[int], None],
        duration_ms: float = DEFAULT_DURATION_MS,
        *,
        steps: int = DEFAULT_STEPS,
        sleep_func: Optional[SleepFunc] = None,
    ):
        if steps < 1:
            raise ValueError(f"steps must be >= 1, got {steps}")
        self._on_progress = on_progress
        self.duration_ms = duration_ms
        self.steps = steps
        self._sleep = sleep_func or asyncio.sleep
        self._progress = 0.0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def current_progress(self) -> float:
        return self._progress

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Start ticking from 0. A no-op while already running.

        Must be called from within a running event loop.
        """
        if self._task is not None and not self._task.done():
            return self._task
        self._progress = 0.0
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def _run(self) -> None:
        # Ticks advance from the current value, so set_progress() moves the ticker.
        tick_seconds = self.duration_ms / self.steps / 1000.0
        increment = 100.0 / self.steps
        ticks = 0
        while self._progress < 100.0:
            await self._sleep(tick_seconds)
            ticks += 1
            next_progress = self._progress + increment
            self._progress = 100.0 if next_progress >= 100.0 - _COMPLETION_TOLERANCE else next_progress
            self._on_progress(round(self._progress))
        logger.debug("Progress simulation completed after %d ticks", ticks)

    def stop(self) -> None:
        """Cancel further ticks. Safe to call repeatedly."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def wait(self) -> None:
        """Wait until the ticker finishes or is stopped."""
        if self._task is not None:
            await asyncio.wait({self._task})

    def set_progress(self, progress: float) -> None:
        """Set progress directly, clamped to [0, 100], and report it immediately."""
        self._progress = max(0.0, min(100.0, float(progress)))
        self._on_progress(round(self._progress))
