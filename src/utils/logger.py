"""Structured logging module with JSON output support."""

import json
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

from src.utils.config import config

_LEVEL_ORDER = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}


class StructuredLogger:
    """Logger that writes one JSON object per line to stdout."""

    def __init__(self, component: str, level: str | None = None):
        """
        Initialize the structured logger.

        Args:
            component: Name of the component using this logger
            level: Minimum level to emit; defaults to config.logging.level (LOG_LEVEL)
        """
        self.component = component
        threshold = (level or config.logging.level).upper()
        self.threshold = _LEVEL_ORDER.get(threshold, _LEVEL_ORDER["INFO"])

    def is_enabled_for(self, level: str) -> bool:
        return _LEVEL_ORDER.get(level.upper(), _LEVEL_ORDER["INFO"]) >= self.threshold

    def _format_log_entry(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> str:
        """
        Format a log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            message: Log message
            context: Optional context fields
            exception: Optional exception to attach

        Returns:
            JSON-formatted log entry
        """
        entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level,
            "component": self.component,
            "message": message,
        }

        if context:
            entry["context"] = context

        if exception is not None:
            entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "stack_trace": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        # Context values such as datetimes fall back to their string form
        return json.dumps(entry, default=str)

    def _emit(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        if not self.is_enabled_for(level):
            return
        log_entry = self._format_log_entry(level, message, context, exception)
        try:
            print(log_entry, file=sys.stdout)
        except (OSError, ValueError) as e:
            print(f"Failed to write log: {e}", file=sys.stderr)

    def debug(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log a debug message."""
        self._emit("DEBUG", message, context)

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log an info message."""
        self._emit("INFO", message, context)

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Log a warning message."""
        self._emit("WARNING", message, context, exception)

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Log an error message with optional exception details."""
        self._emit("ERROR", message, context, exception)

    def critical(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Log a critical message with optional exception details."""
        self._emit("CRITICAL", message, context, exception)

    def log(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """
        Log a message with specified level.

        Unknown levels are logged as INFO.
        """
        level = level.upper()
        if level not in _LEVEL_ORDER:
            level = "INFO"
        self._emit(level, message, context, exception)
