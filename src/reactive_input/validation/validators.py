"""
Ready-made validators.

Most hosts do not need to subclass InputValidator: CallbackValidator wraps a
plain function, and content_check adapts a function that only looks at the
field's text.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from PySide6.QtCore import QObject, QThreadPool

from ..core.config import ValidatorConfig
from ..core.errors import ErrorCode, ValidationError
from ..core.localization import Localizer
from ..core.notification import ValidationResult
from ..fields.field import FieldSnapshot
from .input_validator import InputValidator

ValidateOne = Callable[[FieldSnapshot, Sequence[FieldSnapshot]], Any]


def coerce_result(target: FieldSnapshot, outcome: Any) -> ValidationResult:
    """
    Turn what a validator callback returned into a ValidationResult.

    Accepted outcomes:
        ValidationResult: returned unchanged
        None: success
        (bool, str): (valid, message) as used by content checks

    Raises:
        ValidationError: If the outcome has any other shape
    """
    if isinstance(outcome, ValidationResult):
        return outcome
    if outcome is None:
        return ValidationResult.success(target)
    if isinstance(outcome, tuple) and len(outcome) == 2 and isinstance(outcome[0], bool):
        is_valid, message = outcome
        if is_valid:
            return ValidationResult.success(target)
        return ValidationResult.failure(target, str(message))

    raise ValidationError(
        f"Validator returned an unsupported value: {type(outcome).__name__}",
        field=target.identifier,
        code=ErrorCode.INVALID_FORMAT,
    )


class CallbackValidator(InputValidator):
    """
    InputValidator driven by a host-supplied callable.

    The callable has the validate_one signature ``(target, pool)`` and may
    return a ValidationResult, None, or a ``(valid, message)`` tuple, or
    raise ValidationError.
    """

    def __init__(
        self,
        callback: ValidateOne,
        config: ValidatorConfig | None = None,
        localizer: Localizer | None = None,
        thread_pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(config=config, localizer=localizer, thread_pool=thread_pool, parent=parent)
        self._callback = callback

    def validate_one(self, target: FieldSnapshot, pool: Sequence[FieldSnapshot]) -> ValidationResult:
        return coerce_result(target, self._callback(target, pool))


def content_check(check: Callable[[str], tuple[bool, str]]) -> ValidateOne:
    """
    Adapt a check on the field's text alone into a validator callback.

    Empty optional fields are accepted without calling check.

    Args:
        check: Callable returning (valid, message) for a content string

    Returns:
        Callback usable with CallbackValidator
    """

    def validate(target: FieldSnapshot, pool: Sequence[FieldSnapshot]) -> ValidationResult:
        if target.is_empty and not target.is_required:
            return ValidationResult.success(target)
        return coerce_result(target, check(target.content))

    return validate


def per_field(checks: dict[str, ValidateOne], default: ValidateOne | None = None) -> ValidateOne:
    """
    Dispatch to a different callback per field identifier.

    Fields without an entry use default, or pass when there is none.

    Args:
        checks: Mapping of identifier to validator callback
        default: Callback for identifiers not in checks

    Returns:
        Callback usable with CallbackValidator
    """

    def validate(target: FieldSnapshot, pool: Sequence[FieldSnapshot]) -> Any:
        callback = checks.get(target.identifier, default)
        if callback is None:
            return ValidationResult.success(target)
        return callback(target, pool)

    return validate
