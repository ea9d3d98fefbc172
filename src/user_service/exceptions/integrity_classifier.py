r"""
Storage error classification for the signup workflow.

A failed insert can fail for three operationally different reasons:

| Storage failure                                   | Kind               | HTTP |
| ------------------------------------------------- | ------------------ | ---- |
| engine error code 23505 (unique violation)        | `DUPLICATE_KEY`    | 409  |
| any other engine error code                       | `UNKNOWN_QUERY`    | 500  |
| no engine code at all (connection, pool, OS, ...) | `UNKNOWN_DATABASE` | 500  |

The classifier only looks at the error; it never raises, retries or touches the
session. Turning the kind into a status and message is the job of
`SIGNUP_ERROR_RESPONSES` in `exceptions/base.py`.

Postgres reports SQLSTATE codes directly (`pgcode` on psycopg2 and on
SQLAlchemy's asyncpg adapter, `sqlstate` on psycopg 3 / raw asyncpg). SQLite
reports extended result names, which are translated to the matching SQLSTATE so
the unique-violation contract (`23505`) holds on both engines.
"""
import logging
from enum import Enum

from sqlalchemy.exc import DBAPIError, IntegrityError

from .base import SignupErrorKind

logger = logging.getLogger(__name__)


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


# sqlite3 `sqlite_errorname` -> SQLSTATE
SQLITE_ERROR_SQLSTATE = {
    "SQLITE_CONSTRAINT_UNIQUE": PostgresErrorCodes.UNIQUE_VIOLATION.value,
    "SQLITE_CONSTRAINT_PRIMARYKEY": PostgresErrorCodes.UNIQUE_VIOLATION.value,
    "SQLITE_CONSTRAINT_NOTNULL": PostgresErrorCodes.NOT_NULL_VIOLATION.value,
    "SQLITE_CONSTRAINT_FOREIGNKEY": PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value,
    "SQLITE_CONSTRAINT_CHECK": PostgresErrorCodes.CHECK_VIOLATION.value,
}


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def extract_error_code(orig) -> str | None:
    """
    Return the engine error code carried by a DBAPI exception, or None when the
    driver did not attach one.
    """
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)

    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname:
        return SQLITE_ERROR_SQLSTATE.get(errorname, errorname)

    return None


def _code_from_generic_message(msg: str) -> str | None:
    """
    Last resort for IntegrityErrors whose driver exposes no code (older sqlite3 builds).
    """
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate key"]):
        return PostgresErrorCodes.UNIQUE_VIOLATION.value

    if _match_any(normalized, ["not null constraint", "null value in column"]):
        return PostgresErrorCodes.NOT_NULL_VIOLATION.value

    return None


def _constraint_name(orig) -> str | None:
    # psycopg exposes diag.constraint_name; asyncpg exposes constraint_name directly
    diag = getattr(orig, "diag", None)
    if diag is not None:
        return getattr(diag, "constraint_name", None)
    return getattr(orig, "constraint_name", None)


def classify_storage_error(exc: BaseException) -> SignupErrorKind:
    """
    Classify a storage failure raised while inserting a user.

    Returns:
        SignupErrorKind.DUPLICATE_KEY for a unique violation,
        SignupErrorKind.UNKNOWN_QUERY for any other engine-reported error,
        SignupErrorKind.UNKNOWN_DATABASE for everything else.
    """
    if isinstance(exc, DBAPIError) and not exc.connection_invalidated:
        orig = exc.orig
        code = extract_error_code(orig)
        if code is None and isinstance(exc, IntegrityError):
            code = _code_from_generic_message(str(orig))

        if code is not None:
            constraint_name = _constraint_name(orig)

            if code == PostgresErrorCodes.UNIQUE_VIOLATION:
                # Expected under normal use (and under concurrent signups): INFO, not WARNING.
                logger.info(
                    "classifier.duplicate_key",
                    extra={"pgcode": code, "constraint_name": constraint_name},
                )
                return SignupErrorKind.DUPLICATE_KEY

            logger.warning(
                "classifier.unknown_query",
                extra={
                    "pgcode": code,
                    "constraint_name": constraint_name,
                    "error_type": type(orig).__name__,
                    "error_detail": str(orig)[:500],
                },
            )
            return SignupErrorKind.UNKNOWN_QUERY

    logger.error(
        "classifier.unknown_database",
        extra={"error_type": type(exc).__name__},
    )
    # Raw text may contain hosts or credentials: DEBUG only.
    logger.debug("classifier.unknown_database_raw", extra={"raw": repr(exc)})
    return SignupErrorKind.UNKNOWN_DATABASE
