"""Error taxonomy surfaced by the monitor service."""

from __future__ import annotations

from typing import Optional


class MonitorError(Exception):
    """Base class for all domain errors."""


class FormatError(MonitorError):
    """Raised when an ingestion payload cannot be parsed."""

    def __init__(self, reason: str, field_index: Optional[int] = None) -> None:
        self.reason = reason
        self.field_index = field_index
        if field_index is None:
            message = reason
        else:
            message = f"Field {field_index}: {reason}"
        super().__init__(message)


class NotFound(MonitorError):
    """Raised when a query has no readings to report on."""


class StoreError(MonitorError):
    """Raised when the reading store fails to persist or load data."""
