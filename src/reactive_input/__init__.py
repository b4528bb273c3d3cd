"""
Reactive input tracking and validation.

Track the content of input fields as Qt signals, and validate one or many
fields with required-field checks plus host-supplied validation, either once
(validate_all) or continuously as fields change (validate_latest).
"""

from .core.config import RoundPolicy, ValidatorConfig, load_config
from .core.error_handler import get_error_handler, init_logging
from .core.errors import BaseAppError, ConfigError, FieldMetadataError, ValidationError, ValidatorFailure
from .core.notification import NotificationSet, ValidationResult
from .core.threading import ValidationRound
from .fields import Field, FieldMetadata, FieldSnapshot, FieldState, Subscription, combine_latest
from .validation import CallbackValidator, InputValidator, content_check, per_field

__version__ = "0.1.0"

__all__ = [
    "BaseAppError",
    "CallbackValidator",
    "ConfigError",
    "Field",
    "FieldMetadata",
    "FieldMetadataError",
    "FieldSnapshot",
    "FieldState",
    "InputValidator",
    "NotificationSet",
    "RoundPolicy",
    "Subscription",
    "ValidationError",
    "ValidationResult",
    "ValidationRound",
    "ValidatorConfig",
    "ValidatorFailure",
    "combine_latest",
    "content_check",
    "get_error_handler",
    "init_logging",
    "load_config",
    "per_field",
]
