# src/user_service/core/logging/builder.py
"""
Logging builder: turn Settings into a dictConfig mapping and apply it.

    setup_logging(settings)   # once, at process start (run() / test session)

make_dict_config() is pure and returns the mapping, so the wiring can be
asserted in tests; setup_logging() is the only side-effecting entry point.

Settings read: LOG_LEVEL, LOG_FORMAT, LOG_TO_STDOUT, LOG_DIR, LOG_MAX_BYTES,
LOG_BACKUP_COUNT, ENABLE_SQL_LOGGING, ENV. Any object exposing those
attributes works (tests pass small stand-in classes).
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from user_service.config.settings import Settings
from user_service.utils.logging import get_project_name

from .filters import RedactFilter, RequestIdFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"


def _file_logging_enabled(settings: Settings) -> bool:
    return not settings.LOG_TO_STDOUT and bool(settings.LOG_DIR)


def _formatters(settings: Settings) -> dict:
    text_class = ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter
    return {
        "standard": {"()": text_class, "format": TEXT_FORMAT},
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="user-service"),
        },
    }


def _handlers(settings: Settings) -> dict[str, dict]:
    handlers = {"console": get_console_handler(settings)}
    if _file_logging_enabled(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)
    return handlers


def _loggers(settings: Settings, handler_names: list[str]) -> dict:
    return {
        "": {"handlers": handler_names, "level": settings.LOG_LEVEL, "propagate": True},
        "uvicorn.error": {"handlers": handler_names, "level": settings.LOG_LEVEL, "propagate": False},
        "uvicorn.access": {"handlers": ["console"], "level": "INFO", "propagate": False},
        # Echoed statements carry bound parameters, passwords included.
        "sqlalchemy.engine": {
            "handlers": ["console"],
            "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
            "propagate": False,
        },
    }


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping for `settings`.

    Handlers: `console` always; `file` + `error_file` when writing to LOG_DIR,
    otherwise `error_console`. Every handler runs the `request_id` and
    `redact` filters.
    """
    handlers = _handlers(settings)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _formatters(settings),
        "filters": {
            "request_id": {"()": RequestIdFilter},
            "redact": {"()": RedactFilter},
        },
        "handlers": handlers,
        "loggers": _loggers(settings, list(handlers)),
    }


def setup_logging(settings: Settings) -> None:
    """Create LOG_DIR when needed, then apply the dictConfig."""
    if _file_logging_enabled(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # covers records logged directly on the root logger
    logging.getLogger().addFilter(RequestIdFilter())
