"""Custom exceptions for the chart pipeline."""


from __future__ import annotations

from typing import Any


class SheetChartError(Exception):
    """Base exception for the project.

    Every error raised towards a caller carries a message that can be shown to
    the end user as-is.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class ConfigError(SheetChartError):
    """Raised when configuration files are missing/invalid."""


class FieldError(SheetChartError):
    """Error tied to one field of a chart specification (or one column)."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["field"] = self.field
        return out


class ValidationError(FieldError):
    """Raised when a required spec field is missing/invalid for the chart type."""


class DataTypeError(FieldError):
    """Raised when a named column is not numeric where a number is required."""


class EmptyResultError(SheetChartError):
    """Raised when grouping/aggregation produced no usable series or points."""


class UpstreamFetchError(SheetChartError):
    """Raised when a sheet cannot be retrieved from storage."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class InvalidTransition(SheetChartError):
    """Raised when a wizard step is requested from a state that does not allow it."""


class RetryCancelled(SheetChartError):
    """Raised when a retrying call is cancelled through its token."""
