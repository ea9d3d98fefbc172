# src/user_service/core/logging/formatters.py

"""
Custom logging formatters.

  - JsonFormatter: one JSON object per record, for log collectors. Includes
    service, env, version and request_id plus any `extra={...}` fields.
  - ColorFormatter: compact ANSI-colored lines for local development consoles.

builder.py picks one per handler based on settings.LOG_FORMAT.

Formatters print whatever is passed in `extra`. Sensitive attributes are
masked earlier by RedactFilter (filters.py); do not rely on the formatter for it.
"""

import json
import logging
from typing import Any
from logging import LogRecord
from user_service.utils.logging import get_project_version

PROJECT_VERSION = get_project_version()

# Standard LogRecord attributes; anything else on a record came from `extra`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Construction:
      - env: environment name (e.g., "development" | "production"); optional.
      - service: logical service name included in every record.
      - datefmt: optional date format passed to logging.Formatter.formatTime.

    format() never raises: non-serializable extras are stringified.
    """

    def __init__(self, *, env: str | None = None, service: str = "user-service", datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_record or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        # default=str is a second safety net for nested non-serializable objects
        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development-friendly colored formatter:
        TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE
    Only the level name is colored. Tracebacks are appended on new lines.
    """

    COLOR_CODES = {
        "DEBUG": "\033[1;36;47m",   # bold cyan on white
        "INFO": "\033[32m",         # green
        "WARNING": "\033[33m",      # yellow
        "ERROR": "\033[31m",        # red
        "CRITICAL": "\033[1;41m",   # bold on red background
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        reset = self.COLOR_CODES["RESET"]
        timestamp = self.formatTime(record, self.datefmt)

        base = (
            f"{timestamp} | {color}{record.levelname:<10}{reset} | "
            f"{record.name:<30} | "
            f"{getattr(record, 'request_id', '-'):<10} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)

        return base
