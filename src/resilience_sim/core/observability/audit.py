"""Audit trail for resilience decisions.

Breaker transitions, shed calls, retry outcomes, configuration switches and
failed facade operations are written as ``AUDIT:`` records on a dedicated
logger, so they can be filtered apart from per-operation debug output.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Resilience decisions worth an audit record."""

    CIRCUIT_STATE_CHANGE = "circuit_state_change"
    CIRCUIT_REJECTED = "circuit_rejected"
    RETRY_ATTEMPT = "retry_attempt"
    RETRY_EXHAUSTED = "retry_exhausted"
    CONFIG_CHANGE = "config_change"
    OPERATION_FAILED = "operation_failed"
    OTHER = "other"


@dataclass
class AuditEvent:
    """One audit record.

    ``subject`` names what the decision was about: a breaker, an
    operation, or the simulator itself.
    """

    event_type: AuditEventType
    subject: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }
        if self.subject:
            result["subject"] = self.subject
        return result


class AuditLogger:
    """Writes ``AuditEvent`` records to ``<module>.audit``."""

    def __init__(self, name: str = f"{__name__}.audit"):
        self._logger = logging.getLogger(name)

    def log(self, event: AuditEvent) -> None:
        label = event.event_type.value
        if event.subject:
            label = f"{label} [{event.subject}]"
        self._logger.info(f"AUDIT: {label}", extra={"audit": event.to_dict()})

    def circuit_state_change(self, breaker: str, old_state: str, new_state: str, failures: int) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.CIRCUIT_STATE_CHANGE,
                subject=breaker,
                details={"old_state": old_state, "new_state": new_state, "failures": failures},
            )
        )

    def retry_exhausted(self, attempts: int, error: BaseException) -> None:
        self.log(
            AuditEvent(
                event_type=AuditEventType.RETRY_EXHAUSTED,
                details={
                    "attempts": attempts,
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
            )
        )


# Global audit logger
_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger."""
    return _audit


def audit_log(event_type: str, subject: Optional[str] = None, **details: Any) -> None:
    """
    Record an audit event by name.

    Args:
        event_type: One of the ``AuditEventType`` values; anything else is
                    recorded as ``other`` with the name kept in the details.
        subject: Breaker or operation the event concerns.
        **details: Additional details to include in the audit log
    """
    try:
        event_enum = AuditEventType(event_type)
    except ValueError:
        event_enum = AuditEventType.OTHER
        details["original_event_type"] = event_type

    _audit.log(AuditEvent(event_type=event_enum, subject=subject, details=details))
