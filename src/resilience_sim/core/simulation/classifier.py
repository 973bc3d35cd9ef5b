"""Error classification for injected failures.

Builds ``SimulationError`` instances from an operation category and
normalizes arbitrary exceptions into the same taxonomy.
"""

from __future__ import annotations

import random
import time
from typing import Dict, Optional, Tuple, Union

from resilience_sim.core.errors.simulation import ErrorType, SimulationError

ERROR_MESSAGES: Dict[ErrorType, Tuple[str, ...]] = {
    ErrorType.NETWORK: (
        "Connection error",
        "Request timed out",
        "Server unavailable",
        "Temporary network error",
    ),
    ErrorType.VALIDATION: (
        "Invalid data",
        "Incorrect format",
        "Missing required fields",
        "Validation failed",
    ),
    ErrorType.PROCESSING: (
        "Processing error",
        "Operation failed",
        "Resource unavailable",
        "Internal server error",
    ),
    ErrorType.AUTH: (
        "Authentication error",
        "Session expired",
        "Insufficient permissions",
        "Unauthorized user",
    ),
    ErrorType.UPLOAD: (
        "Error uploading file",
        "File too large",
        "Unsupported file format",
        "Transfer failed",
    ),
    ErrorType.DOWNLOAD: (
        "Error generating file",
        "File not available",
        "Download error",
        "Resource temporarily unavailable",
    ),
}


def resolve_error_type(value: Union[str, ErrorType]) -> ErrorType:
    """Map a category name to ``ErrorType``; unknown names fall back to network."""
    try:
        return ErrorType(value)
    except ValueError:
        return ErrorType.NETWORK


def generate_simulation_error(
    error_type: Union[str, ErrorType],
    custom_message: Optional[str] = None,
    *,
    rng: Optional[random.Random] = None,
) -> SimulationError:
    """Build a classified failure for an operation category.

    Args:
        error_type: Operation category. Unknown categories are treated as network.
        custom_message: Message to use instead of one drawn from the pool.
        rng: Injectable Random instance for deterministic testing.

    Returns:
        SimulationError whose ``retryable`` flag is consistent with its type.
    """
    _rng = rng or random.Random()
    resolved = resolve_error_type(error_type)
    message = custom_message or _rng.choice(ERROR_MESSAGES[resolved])
    code = f"SIM_{resolved.value.upper()}_{_rng.randrange(1000)}"
    return SimulationError(resolved, message, code)


def to_simulation_error(exc: BaseException) -> SimulationError:
    """Normalize any exception into the simulation taxonomy.

    ``SimulationError`` instances are returned unchanged. Anything else is
    treated as a retryable network failure carrying the original message.
    """
    if isinstance(exc, SimulationError):
        return exc
    message = str(exc) or "Unknown error"
    return SimulationError(
        ErrorType.NETWORK,
        message,
        f"SIM_ERROR_{int(time.time() * 1000)}",
        retryable=True,
    )


def is_retryable(exc: BaseException) -> bool:
    """True only when the error explicitly declares ``retryable is True``.

    Unclassified errors (no ``retryable`` attribute) are never retried.
    """
    return getattr(exc, "retryable", None) is True
