"""
Error types raised by the sheet gateway core.
Routers translate these into {success: false, ...} envelopes.
"""
from typing import Any, Dict, Optional, Sequence


class GatewayError(Exception):
    """Base class for errors the gateway reports to callers."""


class ConfigurationError(GatewayError):
    """A required setting (e.g. the write credential) is missing."""


class TodoValidationError(GatewayError):
    """The incoming todo payload failed field validation."""


class UpstreamWriteError(GatewayError):
    """The append endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body or ""
        super().__init__(f"Sheets API error: {status_code} - {self.body}")


def describe_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """First pydantic error as a one-line message for the 400 envelope."""
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid request: {where + ': ' if where else ''}{first.get('msg', 'malformed body')}"
