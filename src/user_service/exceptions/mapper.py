import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import RepositoryError, StorageError

logger = logging.getLogger(__name__)


async def _safe_rollback(db: AsyncSession, model_name: str | None) -> None:
    try:
        await db.rollback()
    except Exception:
        # If rollback fails, that is unusual: log exception (with stack) at ERROR.
        logger.exception("Failed to rollback session after storage error", extra={"model": model_name})


# -----------------------
# Async context managers to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None, operation: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, "User", "list"):
            ... DB ops ...
    Rolls back on error and raises a sanitized StorageError chained to the original.
    App-level errors (RepositoryError subclasses) pass through untouched.
    """
    try:
        yield
    except RepositoryError:
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name)
        # Unexpected exceptions are logged with stack trace for diagnostics.
        logger.exception(
            "Unexpected DB error for %s", model_name,
            extra={"model": model_name, "operation": operation},
        )
        raise StorageError(f"Failed to {operation or 'operate on'} {model_name or 'database'}") from exc


@asynccontextmanager
async def rollback_on_error(db: AsyncSession, model_name: str | None = None):
    """
    Roll back and re-raise the storage exception for the caller to classify
    (see integrity_classifier.classify_storage_error).

    SQLAlchemy and OS-level errors are re-raised unchanged. Anything else the
    driver raised while executing (e.g. sqlite3's UnicodeEncodeError when
    binding a lone surrogate) is wrapped in a StorageError so it is still
    treated as a storage failure. Only wrap the statement itself in this block.
    """
    try:
        yield
    except (SQLAlchemyError, OSError):
        await _safe_rollback(db, model_name)
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name)
        logger.warning(
            "Non-DBAPI error from storage for %s", model_name,
            extra={"model": model_name, "error_type": type(exc).__name__},
        )
        raise StorageError(f"Failed to write {model_name or 'database'}") from exc
