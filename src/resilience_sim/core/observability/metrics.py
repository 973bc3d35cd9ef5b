"""Metric emission for simulated operations.

Operation timings and error counts are written as ``METRIC:`` log records
so a log pipeline can aggregate them without a metrics backend.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class MetricType(Enum):
    COUNTER = "counter"
    TIMER = "timer"


@dataclass
class Metric:
    """A single emitted measurement."""

    name: str
    value: Union[int, float]
    metric_type: MetricType
    labels: Dict[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "type": self.metric_type.value,
            "labels": self.labels,
            "timestamp": self.timestamp,
        }


class MetricsCollector:
    """Writes metrics to ``<module>.metrics`` as structured log records.

    Args:
        prefix: Namespace prepended to every metric name.
        enabled: When False, metrics are dropped without logging.
    """

    def __init__(self, prefix: str = "resilience_sim", enabled: bool = True):
        self.prefix = prefix
        self.enabled = enabled
        self._logger = logging.getLogger(f"{__name__}.metrics")

    def emit(self, metric: Metric) -> None:
        if not self.enabled:
            return
        self._logger.info(f"METRIC: {self.prefix}.{metric.name}", extra={"metric": metric.to_dict()})

    def counter(self, name: str, value: int = 1, labels: Optional[Dict[str, str]] = None) -> None:
        self.emit(Metric(name, value, MetricType.COUNTER, labels or {}))

    def timer(self, name: str, duration_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
        """Emit a duration in milliseconds."""
        self.emit(Metric(name, round(duration_ms, 3), MetricType.TIMER, labels or {}))


# Global metrics collector
_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return _metrics
