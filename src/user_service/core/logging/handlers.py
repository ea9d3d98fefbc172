# src/user_service/core/logging/handlers.py
"""
Handler factories for logging.dictConfig.

Each function returns a handler configuration dict (not a handler instance);
builder.py decides which of them are wired in:

| Handler         | Destination           | Levels             | Active when                     |
| --------------- | --------------------- | ------------------ | ------------------------------- |
| `console`       | stderr                | >= LOG_LEVEL       | always                          |
| `file`          | LOG_DIR/app.log       | >= LOG_LEVEL       | LOG_TO_STDOUT=false and LOG_DIR |
| `error_file`    | LOG_DIR/errors.log    | >= ERROR (json)    | LOG_TO_STDOUT=false and LOG_DIR |
| `error_console` | stderr                | >= ERROR (json)    | otherwise                       |

The formatter and filter names referenced here ("json", "standard",
"request_id", "redact") are declared by builder.make_dict_config().
"""

from user_service.config.settings import Settings
from pathlib import Path


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": ["request_id", "redact"],
        # To force stdout instead of stderr, add:
        # "stream": "ext://sys.stdout"
    }


def get_file_handler(settings: Settings) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filename": str(Path(settings.LOG_DIR) / "app.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }


# Error-only rotating file, kept structured for alerting/ingestion.
def get_error_file_handler(settings: Settings) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "level": "ERROR",
        "filename": str(Path(settings.LOG_DIR) / "errors.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }


def get_error_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": "json",
        "level": "ERROR",
        "filters": ["request_id", "redact"],
    }
