"""
Centralized error reporting and logging for reactive input validation.

This module provides a singleton ErrorHandler that captures exceptions raised
by validator callbacks, normalizes them into the package error hierarchy, logs
them and re-emits them as a Qt signal so hosts can surface them.
"""

from __future__ import annotations

import logging
import logging.handlers
import traceback
from pathlib import Path
from typing import Any, ClassVar

from PySide6.QtCore import QObject, Signal

from .config import ValidatorConfig
from .errors import BaseAppError, from_exception

ERRORS_LOGGER_NAME = "reactive_input.errors"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | code=%(app_code)s | %(message)s"


class _AppCodeFilter(logging.Filter):
    """Make sure every record carries an app_code for the formatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "app_code"):
            record.app_code = "-"
        return True


class ErrorHandler(QObject):
    """
    Centralized error handler with logging.

    This singleton class provides:
    - Exception capture and normalization
    - Structured logging, optionally to a rotating file
    - Qt signal emission for host integration
    """

    # Signal emitted when an error occurs (thread-safe)
    errorOccurred = Signal(object)  # BaseAppError

    _instance: ClassVar[ErrorHandler | None] = None
    _logger: ClassVar[logging.Logger | None] = None

    def __new__(cls) -> ErrorHandler:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the error handler (called only once due to singleton)."""
        if hasattr(self, "_initialized"):
            return

        super().__init__()
        self._initialized = True
        self._file_handler: logging.Handler | None = None
        self._setup_logging()

    def capture(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Capture and normalize an exception into a BaseAppError.

        Args:
            exception: The exception to capture
            context: Optional context information

        Returns:
            BaseAppError with normalized metadata
        """
        safe_context = self._sanitize_context(context or {})
        app_error = from_exception(exception, safe_context)

        if not app_error.technical_message:
            app_error.technical_message = f"{type(exception).__name__}: {exception}"

        if "traceback" not in app_error.context:
            tb_str = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
            app_error.context["traceback"] = tb_str

        return app_error

    def handle(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Handle an exception by capturing, logging, and emitting signals.

        Args:
            exception: The exception to handle
            context: Optional context information

        Returns:
            BaseAppError for further processing
        """
        app_error = self.capture(exception, context)

        if self._logger:
            self._logger.error(
                f"[{app_error.code.value}] {app_error.user_message}",
                extra={
                    "app_code": app_error.code.value,
                    "error_type": app_error.type.value,
                    "severity": app_error.severity.value,
                },
                exc_info=exception if exception.__traceback__ else None,
            )

        self.errorOccurred.emit(app_error)
        return app_error

    def configure(self, config: ValidatorConfig) -> None:
        """
        Apply log level and optional log file from a ValidatorConfig.

        Args:
            config: Configuration to apply
        """
        level = getattr(logging, config.log_level, logging.INFO)
        logging.getLogger("reactive_input").setLevel(level)

        if ErrorHandler._logger is None:
            return

        if self._file_handler is not None:
            ErrorHandler._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

        if config.log_file:
            log_path = Path(config.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=5_242_880,  # 5MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            file_handler.addFilter(_AppCodeFilter())
            ErrorHandler._logger.addHandler(file_handler)
            self._file_handler = file_handler

    def _setup_logging(self) -> None:
        """Set up the errors logger with a console handler."""
        ErrorHandler._logger = logging.getLogger(ERRORS_LOGGER_NAME)

        # Avoid duplicate handlers
        if not ErrorHandler._logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            console_handler.addFilter(_AppCodeFilter())
            console_handler.setLevel(logging.WARNING)  # Only warnings and errors to console
            ErrorHandler._logger.addHandler(console_handler)

    def _sanitize_context(self, context: dict[str, Any]) -> dict[str, Any]:
        """
        Sanitize context to keep log records small.

        Args:
            context: Raw context dictionary

        Returns:
            Sanitized context dictionary
        """
        safe_context: dict[str, Any] = {}
        max_items = 20

        for item_count, (key, value) in enumerate(context.items()):
            if item_count >= max_items:
                safe_context["..."] = f"({len(context) - max_items} more items truncated)"
                break

            if isinstance(value, str):
                safe_context[key] = value if len(value) <= 200 else value[:200] + "..."
            else:
                try:
                    safe_context[key] = repr(value)[:200]
                except Exception:
                    safe_context[key] = "[REPR_FAILED]"

        return safe_context


def get_error_handler() -> ErrorHandler:
    """
    Get the global ErrorHandler instance.

    Returns:
        The singleton ErrorHandler instance
    """
    return ErrorHandler()


def init_logging(config: ValidatorConfig | None = None) -> ErrorHandler:
    """
    Initialize logging for the package.

    Sets up the error handler's logger and applies the configured level and
    log file. Hosts call this once at startup; the library itself never
    configures the root logger.

    Args:
        config: Optional configuration, defaults to ValidatorConfig()

    Returns:
        The configured ErrorHandler instance
    """
    handler = get_error_handler()
    handler.configure(config or ValidatorConfig())
    return handler
