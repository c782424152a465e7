"""
Custom Exception Hierarchy

Provides specific exception types for the decision-support error categories
with structured error information.
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
        """Convert exception to a JSON-safe dictionary."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class PatientValidationError(DecisionSupportError):
    """
    One or more patient fields are malformed or outside plausible bounds.

    ``field_errors`` holds the individual ``FieldError`` records so callers
    can re-prompt or reject a single batch row.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[Any]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        field_errors = list(field_errors or [])
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={
                "fields": [e.to_dict() for e in field_errors],
                **(details or {})
            }
        )
        self.field_errors = field_errors


class BatchInputError(DecisionSupportError):
    """The batch source as a whole could not be read."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INGESTION_ERROR",
            details={"source": source, **(details or {})}
        )
        self.source = source


class ConfigurationError(DecisionSupportError):
    """Invalid engine or environment configuration."""

    def __init__(
        self,
        message: str,
        setting: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"setting": setting, **(details or {})}
        )
        self.setting = setting


class EngineContractError(DecisionSupportError):
    """An internal invariant of the engine was violated (logic defect)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONTRACT_VIOLATION",
            details=details
        )
