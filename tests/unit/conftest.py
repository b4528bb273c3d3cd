"""
Shared fixtures for field and validator tests.
"""

import pytest
from validator_fixtures import MockInput, MockInputValidator

from reactive_input.core.config import ValidatorConfig
from reactive_input.fields.field_state import FieldState


@pytest.fixture(scope="session", autouse=True)
def qapp_instance(qapp):
    """Make sure a QApplication exists for every test."""
    yield qapp


@pytest.fixture
def validator_config():
    """Configuration with a dedicated pool large enough for staggered tests."""
    return ValidatorConfig(max_thread_count=4)


@pytest.fixture
def make_fields():
    """Build FieldState objects from MockInput metadata."""

    def build(*inputs):
        return [FieldState(mock) for mock in inputs]

    return build


@pytest.fixture
def three_inputs():
    """Three optional inputs; the second fails custom validation."""
    return [
        MockInput("first"),
        MockInput("second", validation_error=True),
        MockInput("third"),
    ]


@pytest.fixture
def make_validator(validator_config, qtbot):
    """
    Factory for MockInputValidator sharing the test configuration.

    Every validator built here is kept alive until its rounds have drained.
    """
    built = []

    def build(inputs, config=None, **kwargs):
        validator = MockInputValidator(inputs, config=config or validator_config, **kwargs)
        built.append(validator)
        return validator

    yield build

    for validator in built:
        validator.cancel_all_rounds()
        qtbot.waitUntil(lambda v=validator: v.active_rounds() == [], timeout=5000)
