"""
Observability utilities for resilience-sim.

Provides per-operation metrics, structured metric emission, and audit
logging for resilience events.
"""

from resilience_sim.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from resilience_sim.core.observability.metrics import (
    Metric,
    MetricsCollector,
    MetricType,
    get_metrics,
)
from resilience_sim.core.observability.monitor import (
    OperationMetric,
    OperationMetricView,
    OperationMonitor,
    get_operation_monitor,
    reset_operation_monitor_for_testing,
)

__all__ = [
    # Monitor
    "OperationMetric",
    "OperationMetricView",
    "OperationMonitor",
    "get_operation_monitor",
    "reset_operation_monitor_for_testing",
    # Metrics
    "Metric",
    "MetricType",
    "MetricsCollector",
    "get_metrics",
    # Audit
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
]
