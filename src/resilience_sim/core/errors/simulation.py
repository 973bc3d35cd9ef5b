"""Classified failures injected by the simulator.

Every injected failure belongs to exactly one ``ErrorType`` and carries a
``retryable`` verdict derived from that type, so callers can branch on
``error.retryable`` without inspecting the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from resilience_sim.core.errors.base import ResilienceSimError


class ErrorType(str, Enum):
    """Operation categories a simulated failure can belong to."""

    NETWORK = "network"
    VALIDATION = "validation"
    PROCESSING = "processing"
    AUTH = "auth"
    UPLOAD = "upload"
    DOWNLOAD = "download"

    @property
    def retryable(self) -> bool:
        return self not in NON_RETRYABLE_TYPES


NON_RETRYABLE_TYPES = frozenset({ErrorType.VALIDATION, ErrorType.AUTH})
RETRYABLE_TYPES = frozenset(t for t in ErrorType if t not in NON_RETRYABLE_TYPES)


class SimulationError(ResilienceSimError):
    """A typed, classified failure produced by the simulator.

    Attributes:
        type: Operation category of the failure.
        message: Human-readable description, suitable for a notification.
        code: Synthetic identifier (``SIM_<TYPE>_<n>``).
        retryable: Whether the retry coordinator may re-run the operation.
    """

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        code: str,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.type = ErrorType(error_type)
        self.message = message
        self.code = code
        self.retryable = self.type.retryable if retryable is None else retryable

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "message": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }

    def __repr__(self) -> str:
        return (
            f"SimulationError(type={self.type.value!r}, code={self.code!r}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )
