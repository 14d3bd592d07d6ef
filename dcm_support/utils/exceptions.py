"""
Custom Exception Hierarchy

Provides specific exception types for batch input, field validation,
configuration and engine usage errors with structured error information.
"""
from typing import Optional, Dict, Any, List


class DecisionSupportError(Exception):
    """Base exception for all decision-support errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class BatchInputError(DecisionSupportError):
    """Batch source could not be read or parsed as CSV."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="BATCH_INPUT_ERROR",
            details={"source": source, **(details or {})}
        )
        self.source = source


class BatchHeaderError(DecisionSupportError):
    """Batch header lacks one or more required columns; no rows processed."""

    def __init__(
        self,
        missing_columns: List[str],
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Missing required columns: {', '.join(missing_columns)}",
            code="BATCH_HEADER_ERROR",
            details={"missing_columns": list(missing_columns), **(details or {})}
        )
        self.missing_columns = list(missing_columns)


class BatchEmptyError(DecisionSupportError):
    """Batch has no data rows to aggregate."""

    def __init__(
        self,
        message: str = "Batch input contains no data rows",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="BATCH_EMPTY_ERROR",
            details=details
        )


class FieldValidationError(DecisionSupportError):
    """A patient field failed to parse under the strict policy."""

    def __init__(
        self,
        field: str,
        raw_value: Any,
        reason: str = "invalid value",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Field '{field}' rejected ({reason}): {raw_value!r}",
            code="FIELD_VALIDATION_ERROR",
            details={"field": field, "raw_value": raw_value, "reason": reason, **(details or {})}
        )
        self.field = field
        self.raw_value = raw_value
        self.reason = reason


class EngineUsageError(DecisionSupportError):
    """An evaluator was called with input outside its contract."""

    def __init__(
        self,
        message: str,
        component: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="ENGINE_USAGE_ERROR",
            details={"component": component, **(details or {})}
        )
        self.component = component


class ConfigurationError(DecisionSupportError):
    """Engine configuration overrides could not be loaded."""

    def __init__(
        self,
        message: str,
        path: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIG_ERROR",
            details={"path": path, **(details or {})}
        )
        self.path = path
