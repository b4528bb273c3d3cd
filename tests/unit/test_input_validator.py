"""
Tests for InputValidator single-shot validation.
"""

from unittest.mock import Mock

import pytest

from reactive_input.core.errors import ErrorCode, ValidationError
from reactive_input.core.notification import NotificationSet, ValidationResult
from reactive_input.fields.field import Field, FieldSnapshot
from reactive_input.fields.field_state import FieldState
from reactive_input.validation.input_validator import InputValidator
from reactive_input.validation.validators import CallbackValidator

from validator_fixtures import INVALID_TEXT, REQUIRED_TEXT, MockInput


class TestRequireThenValidate:
    """Test the required-field short-circuit."""

    def test_required_empty_never_calls_validator(self, validator_config):
        """Test that an empty required field skips validate_one."""
        callback = Mock(return_value=None)
        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "", required=True)

        result = validator.require_then_validate(target, [target])

        callback.assert_not_called()
        assert result == ValidationResult("a", "", REQUIRED_TEXT)

    def test_required_filled_delegates(self, validator_config):
        """Test that a filled required field is validated with the pool."""
        callback = Mock(return_value=None)
        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "x", required=True)
        pool = [target, FieldSnapshot("b", "")]

        result = validator.require_then_validate(target, pool)

        callback.assert_called_once_with(target, pool)
        assert not result.has_error

    def test_optional_empty_delegates(self, validator_config):
        """Test that an empty optional field is still validated."""
        callback = Mock(return_value=(False, "custom"))
        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "")

        result = validator.require_then_validate(target, [target])

        assert result.error == "custom"

    def test_validation_error_becomes_result(self, validator_config):
        """Test that ValidationError becomes the result error."""

        def callback(target, pool):
            raise ValidationError("Too short", field=target.identifier)

        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "x")

        result = validator.require_then_validate(target, [target])

        assert result == ValidationResult("a", "x", "Too short")

    def test_unexpected_exception_becomes_result(self, validator_config, qtbot):
        """Test that other exceptions are reported and become the result error."""

        def callback(target, pool):
            raise RuntimeError("backend unavailable")

        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "x")

        with qtbot.waitSignal(validator._error_handler.errorOccurred, timeout=1000):
            result = validator.require_then_validate(target, [target])

        assert result.error == "backend unavailable"

    def test_exception_without_message_uses_generic_text(self, validator_config):
        """Test that an exception without message uses the generic error text."""

        def callback(target, pool):
            raise RuntimeError()

        validator = CallbackValidator(callback, config=validator_config)
        target = FieldSnapshot("a", "x")

        result = validator.require_then_validate(target, [target])

        assert result.error == "Validation error occurred"

    def test_non_result_return_value_becomes_failure(self, validator_config, qtbot):
        """Test that a validator returning no ValidationResult yields a reported failure."""

        class ForgetfulValidator(InputValidator):
            def validate_one(self, target, pool):
                return None

        validator = ForgetfulValidator(config=validator_config)
        target = FieldSnapshot("a", "x")

        with qtbot.waitSignal(validator._error_handler.errorOccurred, timeout=1000) as blocker:
            result = validator.require_then_validate(target, [target])

        assert result == ValidationResult("a", "x", "Validation error occurred")
        assert blocker.args[0].code is ErrorCode.VALIDATOR_FAILURE

    def test_custom_localizer(self, validator_config):
        """Test that error text comes from the given localizer."""
        validator = CallbackValidator(Mock(), config=validator_config, localizer=lambda key: f"<{key}>")
        target = FieldSnapshot("a", "", required=True)

        assert validator.require_then_validate(target, [target]).error == "<input.error.required>"

    def test_base_class_requires_validate_one(self, validator_config):
        """Test that the base class fails every field it validates."""
        validator = InputValidator(config=validator_config)
        target = FieldSnapshot("a", "x")

        # NotImplementedError is reported like any other validator failure
        result = validator.require_then_validate(target, [target])
        assert result.has_error


class TestValidateAll:
    """Test one joined validation round."""

    def test_results_follow_pool_order_not_completion_order(self, make_fields, make_validator, qtbot):
        """Test that results keep pool order under staggered delays."""
        inputs = [MockInput("a"), MockInput("b"), MockInput("c")]
        fields = make_fields(*inputs)
        for field_state in fields:
            field_state.content = "filled"
        validator = make_validator(inputs, delays={"a": 0.3, "b": 0.15, "c": 0.0})

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(fields)

        notification = blocker.args[1]
        assert [r.key for r in notification] == ["a", "b", "c"]
        assert validator.completed == ["c", "b", "a"]

    def test_scenario_custom_error_on_filled_field(self, make_fields, make_validator, qtbot):
        """Test that a custom error is reported for a filled field."""
        inputs = [MockInput("a", validation_error=True)]
        fields = make_fields(*inputs)
        fields[0].content = "x"
        validator = make_validator(inputs)
        received = []

        with qtbot.waitSignal(validator.roundFinished, timeout=5000):
            validator.validate_all(fields, received.append)

        result = received[0].results[0]
        assert result.has_error
        assert result.error == INVALID_TEXT

    def test_scenario_required_takes_precedence(self, make_fields, make_validator, qtbot):
        """Test that the required check wins over custom validation."""
        inputs = [MockInput("a", required=True)]
        fields = make_fields(*inputs)
        validator = make_validator(inputs)

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(fields)

        notification = blocker.args[1]
        assert notification.has_error(REQUIRED_TEXT)
        assert validator.calls == []

    def test_mixed_pool(self, make_fields, make_validator, three_inputs, qtbot):
        """Test a pool mixing required, failing and valid fields."""
        three_inputs[0].required = True
        fields = make_fields(*three_inputs)
        fields[1].content = "value"
        validator = make_validator(three_inputs)

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(fields)

        notification = blocker.args[1]
        assert [r.error for r in notification] == [REQUIRED_TEXT, INVALID_TEXT, ""]
        assert sorted(validator.calls) == ["second", "third"]

    def test_snapshots_taken_at_dispatch(self, make_fields, make_validator, qtbot):
        """Test that later edits do not affect a running round."""
        inputs = [MockInput("a")]
        fields = make_fields(*inputs)
        fields[0].content = "before"
        validator = make_validator(inputs, default_delay=0.1)

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(fields)
            fields[0].content = "after"

        assert blocker.args[1].results[0].value == "before"

    def test_empty_pool_finishes_with_empty_set(self, make_validator, qtbot):
        """Test that an empty pool finishes with an empty set."""
        validator = make_validator([])
        received = []

        validation_round = validator.validate_all([])
        validation_round.finished.connect(received.append)
        qtbot.waitUntil(lambda: len(received) == 1, timeout=1000)

        assert received == [NotificationSet()]

    def test_accepts_snapshots(self, make_validator, qtbot):
        """Test that snapshots can be validated directly."""
        validator = make_validator([MockInput("a")])
        snapshots = [FieldSnapshot("a", "x")]

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(snapshots)

        assert not blocker.args[1].has_errors

    def test_field_without_result_still_reported(self, validator_config, qtbot):
        """Test that a field without a result is joined as a failure."""

        class PartialValidator(InputValidator):
            def validate_one(self, target, pool):
                if target.identifier == "b":
                    return None
                return ValidationResult.success(target)

        validator = PartialValidator(config=validator_config)
        pool = [FieldSnapshot("a", "x"), FieldSnapshot("b", "x")]

        with qtbot.waitSignal(validator.roundFinished, timeout=5000) as blocker:
            validator.validate_all(pool)

        notification = blocker.args[1]
        assert [r.key for r in notification] == ["a", "b"]
        assert notification.has_errors
        assert notification.error_messages() == {"b": "Validation error occurred"}
        qtbot.waitUntil(lambda: validator.active_rounds() == [], timeout=5000)

    def test_round_ids_increase(self, make_fields, make_validator, qtbot):
        """Test that every round gets a new id."""
        inputs = [MockInput("a")]
        fields = make_fields(*inputs)
        validator = make_validator(inputs)

        first = validator.validate_all(fields)
        second = validator.validate_all(fields)

        assert second.round_id == first.round_id + 1
        qtbot.waitUntil(lambda: validator.active_rounds() == [], timeout=5000)

    def test_blocking_validation(self, make_fields, make_validator, three_inputs):
        """Test waiting for a round with validate_all_blocking."""
        fields = make_fields(*three_inputs)
        for field_state in fields:
            field_state.content = "filled"
        validator = make_validator(three_inputs, default_delay=0.05)

        notification = validator.validate_all_blocking(fields, timeout_ms=5000)

        assert notification.error_messages() == {"second": INVALID_TEXT}

    def test_blocking_validation_times_out(self, make_fields, make_validator):
        """Test that a slow round raises TimeoutError."""
        inputs = [MockInput("a")]
        fields = make_fields(*inputs)
        fields[0].content = "x"
        validator = make_validator(inputs, default_delay=0.5)

        with pytest.raises(TimeoutError):
            validator.validate_all_blocking(fields, timeout_ms=50)


class TestFieldMetadataIndependence:
    """Validators only see snapshots, never host metadata types."""

    def test_callback_receives_snapshots(self, validator_config, qtbot):
        """Test that callbacks only ever see FieldSnapshot values."""
        seen = []

        def callback(target, pool):
            seen.append((type(target), tuple(type(s) for s in pool)))
            return None

        validator = CallbackValidator(callback, config=validator_config)
        fields = [FieldState(Field("a")), FieldState(Field("b"))]
        fields[0].content = "x"

        with qtbot.waitSignal(validator.roundFinished, timeout=5000):
            validator.validate_all(fields)

        assert seen
        assert all(target is FieldSnapshot for target, _ in seen)
        assert all(pool == (FieldSnapshot, FieldSnapshot) for _, pool in seen)
