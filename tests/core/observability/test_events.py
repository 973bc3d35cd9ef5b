"""Tests for audit and metric log records."""

import logging

from resilience_sim.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    audit_log,
    get_audit_logger,
)
from resilience_sim.core.observability.metrics import MetricsCollector

AUDIT_LOGGER = "resilience_sim.core.observability.audit"
METRICS_LOGGER = "resilience_sim.core.observability.metrics"


class TestAuditLog:
    """Tests for audit_log."""

    def test_known_event(self, caplog):
        with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER):
            audit_log("retry_attempt", attempt=1, delay_ms=700)
        record = caplog.records[-1]
        assert record.getMessage() == "AUDIT: retry_attempt"
        assert record.audit["details"] == {"attempt": 1, "delay_ms": 700}

    def test_unknown_event_is_other(self, caplog):
        with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER):
            audit_log("quota_warning", subject="uploads")
        record = caplog.records[-1]
        assert record.audit["event_type"] == "other"
        assert record.audit["subject"] == "uploads"
        assert record.audit["details"]["original_event_type"] == "quota_warning"

    def test_retry_exhausted_helper(self, caplog):
        with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER):
            get_audit_logger().retry_exhausted(3, RuntimeError("gone"))
        details = caplog.records[-1].audit["details"]
        assert details == {"attempts": 3, "error_type": "RuntimeError", "error": "gone"}

    def test_event_without_subject_omits_it(self):
        event = AuditEvent(event_type=AuditEventType.CONFIG_CHANGE, details={"pattern": "slow"})
        assert "subject" not in event.to_dict()


class TestMetricsCollector:
    """Tests for METRIC log records."""

    def test_timer_record(self, caplog):
        collector = MetricsCollector()
        with caplog.at_level(logging.INFO, logger=METRICS_LOGGER):
            collector.timer("operation.duration", 12.34567, labels={"operation": "fetch"})
        record = caplog.records[-1]
        assert record.getMessage() == "METRIC: resilience_sim.operation.duration"
        assert record.metric["value"] == 12.346
        assert record.metric["type"] == "timer"

    def test_disabled_collector_is_silent(self, caplog):
        collector = MetricsCollector(enabled=False)
        with caplog.at_level(logging.INFO, logger=METRICS_LOGGER):
            collector.counter("operation.errors")
        assert not [r for r in caplog.records if r.getMessage().startswith("METRIC:")]
