"""JSON envelope output for CLI commands.

Every command prints exactly one ``{"success", "data", "error"}`` object
to stdout. Logging goes to stderr so the envelope stays machine-readable.
"""

import json
import sys
from typing import Any, Dict, NoReturn, Optional

import click


def _emit(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def emit_success(data: Any) -> None:
    """Print a success envelope."""
    _emit({"success": True, "data": data, "error": None})


def emit_error(
    message: str,
    code: str = "ERROR",
    error_type: Optional[str] = None,
    remediation: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    error: Dict[str, Any] = {"message": message, "code": code}
    if error_type:
        error["type"] = error_type
    if remediation:
        error["remediation"] = remediation
    if details:
        error["details"] = details
    _emit({"success": False, "data": None, "error": error})
    sys.exit(1)
