"""Structured logging configuration for jira-import.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the jira_import namespace
- Environment variable control (JIRA_IMPORT_LOG_LEVEL, JIRA_IMPORT_LOG_FORMAT)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAMESPACE = "jira_import"

# Extras whose values must never reach log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key", "api_token",
    "authorization", "credential", "auth", "key", "bearer",
}

_STANDARD_FIELDS = {
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
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs one JSON object per record with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (jira_import hierarchy)
    - message: Log message
    - context: Extras dict merged from LogRecord attributes
    - exception: Formatted traceback, when exc_info is set

    Sensitive keys (token, password, authorization, ...) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }
        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local runs (JIRA_IMPORT_LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(
    level: Optional[str] = None, log_format: Optional[str] = None
) -> logging.Logger:
    """Configure logging for all jira_import loggers.

    Args:
        level: Optional log level override. Falls back to JIRA_IMPORT_LOG_LEVEL
               (default: WARNING).
        log_format: Optional format override ("json" or "text"). Falls back to
                    JIRA_IMPORT_LOG_FORMAT (default: json).

    Returns:
        The configured namespace logger.

    Logs go to stderr so that stdout stays free for converted issue output.
    Calling this more than once updates level and formatter in place.
    """
    if level is None:
        level = os.getenv("JIRA_IMPORT_LOG_LEVEL", "WARNING")
    log_level = getattr(logging, level.upper(), logging.WARNING)

    if log_format is None:
        log_format = os.getenv("JIRA_IMPORT_LOG_FORMAT", "json")
    formatter = TextFormatter() if log_format.lower() == "text" else StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(log_level)

    # One handler only, however often this is called
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler(sys.stderr))
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    logger.propagate = False
    return logger
