"""Centralized logging configuration for actus_ledger.

Logging can be configured via environment variables or programmatically.
It supports console and rotating file handlers and optional JSON
structured output.
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

from actus_ledger.exceptions import ConfigurationError

# Default logging configuration
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment variable names
ENV_LOG_LEVEL = "ACTUS_LEDGER_LOG_LEVEL"
ENV_LOG_FILE = "ACTUS_LEDGER_LOG_FILE"
ENV_LOG_FORMAT = "ACTUS_LEDGER_LOG_FORMAT"
ENV_STRUCTURED_LOGS = "ACTUS_LEDGER_STRUCTURED_LOGS"

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON.

        Args:
            record: The log record to format

        Returns:
            JSON string representation of the log record
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields (contract_id, event_type, timestamp, ...)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def _resolve_level(level: str | None) -> int:
    level_str = (level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    if level_str not in VALID_LEVELS:
        raise ConfigurationError(
            "Invalid logging level",
            context={"log_level": level_str, "valid_levels": list(VALID_LEVELS)},
        )
    return getattr(logging, level_str)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger instance with the specified name.

    Loggers below ``actus_ledger`` propagate to the package logger, which
    owns the handlers installed by :func:`configure_logging`.

    Args:
        name: Name of the logger (typically __name__ of the calling module)
        level: Optional log level override

    Returns:
        Logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Processing contract", extra={"contract_id": "PAM-001"})
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(_resolve_level(level))
    return logger


def configure_logging(
    level: str | None = None,
    log_file: str | None = None,
    console: bool = True,
    structured: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> None:
    """Configure logging for the entire actus_ledger package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to environment variable or INFO.
        log_file: Path to log file. Defaults to the environment variable;
                 no file logging when neither is set.
        console: Whether to log to console (stderr). Default: True
        structured: Whether to use JSON structured logging. Default: False
                   Can be overridden by ACTUS_LEDGER_STRUCTURED_LOGS env var.
        max_bytes: Maximum size of log file before rotation (default: 10MB)
        backup_count: Number of backup log files to keep (default: 5)

    Raises:
        ConfigurationError: If the level name is not recognized

    Example:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(level="INFO", log_file="/var/log/actus.log", structured=True)
    """
    log_level = _resolve_level(level)

    logger = logging.getLogger("actus_ledger")
    logger.handlers.clear()
    logger.setLevel(log_level)

    use_structured = structured or os.getenv(ENV_STRUCTURED_LOGS, "").lower() in (
        "true",
        "1",
        "yes",
    )

    if use_structured:
        formatter: logging.Formatter = StructuredFormatter(datefmt=DEFAULT_DATE_FORMAT)
    else:
        log_format = os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)
        formatter = logging.Formatter(log_format, datefmt=DEFAULT_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file_path = log_file or os.getenv(ENV_LOG_FILE)
    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def disable_logging() -> None:
    """Disable all actus_ledger logging.

    Useful for tests or host applications that want to suppress all logging
    output from the package.
    """
    logger = logging.getLogger("actus_ledger")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
