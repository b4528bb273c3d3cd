"""
Reactive validation of tracked input fields.

This package provides the InputValidator base class with its composition
operators, and ready-made validators built on host callbacks.
"""

from ..core.notification import NotificationSet, ValidationResult
from .input_validator import InputValidator
from .validators import CallbackValidator, coerce_result, content_check, per_field

__all__ = [
    "CallbackValidator",
    "InputValidator",
    "NotificationSet",
    "ValidationResult",
    "coerce_result",
    "content_check",
    "per_field",
]
