"""
Error taxonomy for reactive input validation.

This module provides the exception hierarchy used across the package.
Validation failures are normally carried as data on ValidationResult; the
classes here are raised only for programmer errors (bad field metadata,
bad configuration) or used to report validator callback failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Error type categories for consistent error handling."""

    VALIDATION = "validation"
    FIELD = "field"
    CONFIG = "config"
    SYSTEM = "system"


class ErrorCode(Enum):
    """Specific error codes for common scenarios."""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FORMAT = "INVALID_FORMAT"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"

    # Field metadata errors
    MISSING_FIELD_METADATA = "MISSING_FIELD_METADATA"
    INVALID_FIELD_CONTENT = "INVALID_FIELD_CONTENT"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"

    # System errors
    VALIDATOR_FAILURE = "VALIDATOR_FAILURE"
    TIMEOUT = "TIMEOUT"

    # Generic
    UNKNOWN = "UNKNOWN"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class BaseAppError(Exception):
    """
    Base error with structured metadata.

    Root of all package errors, carrying enough information for logging
    and for turning a failure into user-facing text.
    """

    type: ErrorType
    code: ErrorCode
    user_message: str
    technical_message: str | None = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return user-friendly error message."""
        return self.user_message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"type={self.type.value}, "
            f"code={self.code.value}, "
            f"message='{self.user_message}'"
            f")"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "code": self.code.value,
            "user_message": self.user_message,
            "technical_message": self.technical_message,
            "severity": self.severity.value,
            "context": self.context,
        }


class ValidationError(BaseAppError):
    """
    Input validation failure for a single field.

    Host validators may raise this from ``validate_one``; the
    ``user_message`` becomes the error text of the field's result.
    """

    def __init__(
        self,
        user_message: str,
        field: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: dict[str, Any] | None = None,
    ):
        context = context or {}
        if field:
            context["field"] = field

        super().__init__(
            type=ErrorType.VALIDATION,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            context=context,
        )

    @property
    def field(self) -> str | None:
        """Get the field that caused the validation error."""
        return self.context.get("field")


class FieldMetadataError(BaseAppError):
    """Missing or malformed field metadata."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.MISSING_FIELD_METADATA,
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.FIELD,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=ErrorSeverity.HIGH,
            context=context or {},
        )


class ConfigError(BaseAppError):
    """Configuration related errors."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.CONFIG,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            context=context or {},
        )


class ValidatorFailure(BaseAppError):
    """Unexpected exception raised by a validator callback."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.VALIDATOR_FAILURE,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.SYSTEM,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            context=context or {},
        )


# Exception mapping configuration
_EXCEPTION_MAPPING: dict[type[Exception], tuple[ErrorType, ErrorCode, str]] = {
    ValueError: (ErrorType.VALIDATION, ErrorCode.INVALID_INPUT, "Invalid input provided"),
    TypeError: (ErrorType.FIELD, ErrorCode.INVALID_FIELD_CONTENT, "Invalid field content"),
    TimeoutError: (ErrorType.SYSTEM, ErrorCode.TIMEOUT, "Operation timed out"),
}


def map_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Map a built-in exception to a package error.

    Args:
        exc: The exception to map
        context: Optional context information

    Returns:
        BaseAppError instance with appropriate type and metadata
    """
    context = context or {}

    if isinstance(exc, BaseAppError):
        return exc

    exc_type = type(exc)
    if exc_type in _EXCEPTION_MAPPING:
        error_type, error_code, default_message = _EXCEPTION_MAPPING[exc_type]
        user_message = str(exc) if str(exc) else default_message
        technical_message = f"{exc_type.__name__}: {exc}"

        if error_type == ErrorType.VALIDATION:
            return ValidationError(
                user_message, code=error_code, technical_message=technical_message, context=context
            )
        if error_type == ErrorType.FIELD:
            return FieldMetadataError(
                user_message, code=error_code, technical_message=technical_message, context=context
            )
        return ValidatorFailure(user_message, code=error_code, technical_message=technical_message, context=context)

    # Fallback for unknown exceptions
    logger.warning(f"Unknown exception type: {exc_type.__name__}: {exc}")
    return ValidatorFailure(
        str(exc) if str(exc) else "An unexpected error occurred",
        code=ErrorCode.UNKNOWN,
        technical_message=f"{exc_type.__name__}: {exc}",
        context=context,
    )


def from_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Convert any exception to a BaseAppError.

    This is an alias for map_exception for convenience.
    """
    return map_exception(exc, context)
