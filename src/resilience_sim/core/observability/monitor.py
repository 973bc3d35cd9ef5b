"""Per-operation timing and error statistics.

``OperationMonitor`` accumulates a count, total elapsed time, error count
and last-run timestamp for every operation name it sees. Accumulation is
monotonic until ``reset()``; entries are never evicted automatically.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union, overload

from resilience_sim.core.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)


@dataclass
class OperationMetric:
    """Accumulated statistics for one operation name."""

    count: int = 0
    total_time_ms: float = 0.0
    errors: int = 0
    last_run: float = 0.0


@dataclass(frozen=True)
class OperationMetricView:
    """Read-only view of an ``OperationMetric`` with derived rates."""

    count: int
    total_time_ms: float
    errors: int
    last_run: float
    average_time_ms: float
    error_rate: float

    @classmethod
    def from_metric(cls, metric: OperationMetric) -> "OperationMetricView":
        count = metric.count
        return cls(
            count=count,
            total_time_ms=metric.total_time_ms,
            errors=metric.errors,
            last_run=metric.last_run,
            average_time_ms=metric.total_time_ms / count if count else 0.0,
            error_rate=metric.errors / count if count else 0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_time_ms": self.total_time_ms,
            "errors": self.errors,
            "last_run": self.last_run,
            "average_time_ms": self.average_time_ms,
            "error_rate": self.error_rate,
        }


class OperationMonitor:
    """Accumulates per-operation metrics.

    Safe to call from many concurrently completing operations: every
    update happens under a single ``threading.Lock``.

    Args:
        clock: Monotonic clock in seconds used for elapsed time.
        wall_clock: Epoch clock in seconds recorded as ``last_run``.
        collector: Metrics sink receiving one timer per completion.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.perf_counter,
        wall_clock: Callable[[], float] = time.time,
        collector: Optional[MetricsCollector] = None,
    ) -> None:
        self._clock = clock
        self._wall_clock = wall_clock
        self._collector = collector or get_metrics()
        self._metrics: Dict[str, OperationMetric] = {}
        self._lock = threading.Lock()

    def start_operation(self, name: str) -> Callable[[], float]:
        """Begin timing ``name``.

        Returns:
            A function that records the elapsed time when called and
            returns it in milliseconds.
        """
        started = self._clock()

        def end() -> float:
            duration_ms = (self._clock() - started) * 1000.0
            with self._lock:
                metric = self._metrics.setdefault(name, OperationMetric())
                metric.count += 1
                metric.total_time_ms += duration_ms
                metric.last_run = self._wall_clock()
            self._collector.timer("operation.duration", duration_ms, labels={"operation": name})
            return duration_ms

        return end

    def record_error(self, name: str) -> bool:
        """Increment the error count of an already-started operation.

        Unknown names are ignored; returns whether an error was recorded.
        """
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                logger.debug("Ignoring error for unmonitored operation %s", name)
                return False
            metric.errors += 1
        self._collector.counter("operation.errors", labels={"operation": name})
        return True

    @overload
    def get_metrics(self, name: str) -> Optional[OperationMetricView]: ...

    @overload
    def get_metrics(self, name: None = None) -> Dict[str, OperationMetricView]: ...

    def get_metrics(
        self, name: Optional[str] = None
    ) -> Union[Optional[OperationMetricView], Dict[str, OperationMetricView]]:
        """Return one operation's view, or a mapping of every operation to its view."""
        with self._lock:
            if name is not None:
                metric = self._metrics.get(name)
                return OperationMetricView.from_metric(metric) if metric else None
            return {key: OperationMetricView.from_metric(m) for key, m in self._metrics.items()}

    def reset(self, name: Optional[str] = None) -> None:
        """Clear one operation's metrics, or all of them."""
        with self._lock:
            if name is not None:
                self._metrics.pop(name, None)
            else:
                self._metrics.clear()


# Global monitor
_monitor: Optional[OperationMonitor] = None
_monitor_lock = threading.Lock()


def get_operation_monitor() -> OperationMonitor:
    """Get the process-wide OperationMonitor."""
    global _monitor
    if _monitor is None:
        with _monitor_lock:
            if _monitor is None:
                _monitor = OperationMonitor()
    return _monitor


def reset_operation_monitor_for_testing() -> None:
    """Replace the process-wide monitor with a fresh one."""
    global _monitor
    with _monitor_lock:
        _monitor = OperationMonitor()
