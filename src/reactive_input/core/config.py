"""
Configuration for reactive input validation.

This module provides the configuration schema, defaults, and the typed
ValidatorConfig used by validators, the error handler and localization.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema

from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

# Context passed to QCoreApplication.translate for message lookups
TRANSLATION_CONTEXT = "reactive_input"

REQUIRED_ERROR_KEY = "input.error.required"
VALIDATION_ERROR_KEY = "input.error.validation"

# English fallback catalog used when no Qt translator provides the key
DEFAULT_MESSAGES: dict[str, str] = {
    REQUIRED_ERROR_KEY: "This field is required",
    VALIDATION_ERROR_KEY: "Validation error occurred",
}

# Default configuration with all supported keys and JSON-serializable types
DEFAULT_CONFIG: dict[str, Any] = {
    "round_policy": "overlap",  # Options: "overlap", "restart"
    "max_thread_count": 0,  # 0 leaves the thread pool untouched
    "log_level": "INFO",  # Options: "DEBUG", "INFO", "WARNING", "ERROR"
    "log_file": "",
    "messages": dict(DEFAULT_MESSAGES),
}

# JSON Schema for configuration validation (draft-07)
CONFIG_JSON_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Reactive input validator configuration",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "round_policy": {"type": "string", "enum": ["overlap", "restart"]},
        "max_thread_count": {"type": "integer", "minimum": 0},
        "log_level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
        "log_file": {"type": "string"},
        "messages": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
}


class RoundPolicy(Enum):
    """What happens to an in-flight validation round when a new one starts."""

    OVERLAP = "overlap"  # Both rounds run to completion and both emit
    RESTART = "restart"  # The superseded round is cancelled and never emits


@dataclass
class ValidatorConfig:
    """
    Typed configuration for validators.

    Defaults mirror DEFAULT_CONFIG; use from_dict to build from untrusted
    data so it gets checked against CONFIG_JSON_SCHEMA first.
    """

    round_policy: RoundPolicy = RoundPolicy.OVERLAP
    max_thread_count: int = 0
    log_level: str = "INFO"
    log_file: str = ""
    messages: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidatorConfig:
        """
        Create a ValidatorConfig from a dictionary.

        Missing keys fall back to DEFAULT_CONFIG. Message overrides are merged
        on top of the default catalog.

        Args:
            data: Dictionary containing configuration values

        Returns:
            ValidatorConfig instance

        Raises:
            ConfigError: If the data does not match the configuration schema
        """
        try:
            jsonschema.validate(data, CONFIG_JSON_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigError(
                f"Configuration validation failed: {e.message}",
                technical_message=str(e),
                context={"path": list(e.absolute_path)},
            ) from e

        config_data = {**DEFAULT_CONFIG, **data}
        messages = dict(DEFAULT_MESSAGES)
        messages.update(config_data["messages"])

        return cls(
            round_policy=RoundPolicy(config_data["round_policy"]),
            max_thread_count=int(config_data["max_thread_count"]),
            log_level=config_data["log_level"],
            log_file=config_data["log_file"],
            messages=messages,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "round_policy": self.round_policy.value,
            "max_thread_count": self.max_thread_count,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "messages": dict(self.messages),
        }


def load_config(path: str | Path) -> ValidatorConfig:
    """
    Load a ValidatorConfig from a JSON file.

    Args:
        path: Path to a JSON document matching CONFIG_JSON_SCHEMA

    Returns:
        ValidatorConfig instance

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(
            f"Cannot read configuration file: {config_path}",
            code=ErrorCode.CONFIG_PARSE_ERROR,
            technical_message=str(e),
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Configuration file is not valid JSON: {config_path}",
            code=ErrorCode.CONFIG_PARSE_ERROR,
            technical_message=str(e),
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a JSON object: {config_path}")

    config = ValidatorConfig.from_dict(data)
    logger.info(f"Loaded validator configuration from {config_path}")
    return config
