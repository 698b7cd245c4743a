"""multipr logging with JSON file output and bucket context."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# Context attached to every record while a bucket pipeline runs
_bucket_context: dict[str, Any] = {}

_EXTRA_FIELDS = ("bucket", "step", "branch", "command")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if _bucket_context:
            log_data.update(_bucket_context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Args:
            record: Log record to format

        Returns:
            Colored log string
        """
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        context_parts = []
        bucket = getattr(record, "bucket", None) or _bucket_context.get("bucket")
        if bucket:
            context_parts.append(str(bucket))
        step = getattr(record, "step", None) or _bucket_context.get("step")
        if step:
            context_parts.append(str(step))

        context = f"[{':'.join(context_parts)}] " if context_parts else ""

        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {context}{record.getMessage()}"


def set_bucket_context(bucket: str | None = None, step: str | None = None, **kwargs: Any) -> None:
    """Set context for all subsequent log messages.

    Args:
        bucket: Bucket currently being processed
        step: Pipeline step currently running
        **kwargs: Additional context fields
    """
    global _bucket_context
    _bucket_context = {}

    if bucket is not None:
        _bucket_context["bucket"] = bucket
    if step is not None:
        _bucket_context["step"] = step
    _bucket_context.update(kwargs)


def clear_bucket_context() -> None:
    """Clear all bucket context."""
    global _bucket_context
    _bucket_context = {}


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the multipr namespace.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    if name.startswith("multipr."):
        return logging.getLogger(name)
    return logging.getLogger(f"multipr.{name}")


def setup_logging(
    level: str = "warn",
    log_dir: str | Path | None = None,
    json_output: bool = True,
    console_output: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Set up logging configuration.

    Args:
        level: Log level (debug, info, warn, error)
        log_dir: Directory for the JSON log file
        json_output: Whether to write JSON logs to file
        console_output: Whether to output to console
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger("multipr")
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if log_dir and json_output:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # The file always records INFO and above, even when the console is quieter
        file_level = min(log_level, logging.INFO)
        file_handler = RotatingFileHandler(
            log_path / "multipr.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)
        root_logger.setLevel(file_level)

    root_logger.propagate = False


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that adds bucket context to log messages."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_bucket_logger(bucket: str, step: str | None = None) -> LoggerAdapter:
    """Get a logger adapter for a specific bucket.

    Args:
        bucket: Bucket name for context
        step: Optional pipeline step

    Returns:
        LoggerAdapter with bucket context
    """
    logger = get_logger("bucket")
    extra: dict[str, Any] = {"bucket": bucket}
    if step is not None:
        extra["step"] = step
    return LoggerAdapter(logger, extra)


# Initialize default logging on import
setup_logging(console_output=True, json_output=False)
