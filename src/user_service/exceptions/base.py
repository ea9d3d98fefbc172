"""
App-level exceptions raised by repositories and services and turned into HTTP
responses by the handlers in `api/v1/error_handlers.py`.
"""

from enum import Enum
from typing import NamedTuple


# canonical repository-level exception

class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - error_code: canonical short code (e.g., 'not_found', 'storage_failure') used by clients
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "not_found": 404,
        "storage_failure": 500,
        # fallback: default to 400 for general repository errors
    }

    def __init__(self, message: str, *, error_code: str | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"{self.message} (code: {self.error_code})"
        return self.message

    def to_payload(self) -> dict:
        """
        JSON-serializable body for HTTP responses:
            {"detail": "A human-friendly message", "code": "not_found"}
        Never carries raw DB messages or codes.
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        return payload

    def http_status(self) -> int:
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, error_code="not_found")


class StorageError(RepositoryError):
    """Any failure of a read/list/delete statement. Details go to the logs only."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, error_code="storage_failure")


# =================================================================================================================
# Signup failures
# =================================================================================================================

class SignupErrorKind(str, Enum):
    """Outcome of classifying a failed signup insert."""
    DUPLICATE_KEY = "duplicate_key"
    UNKNOWN_QUERY = "unknown_query"
    UNKNOWN_DATABASE = "unknown_database"


class SignupErrorResponse(NamedTuple):
    status_code: int
    message: str


# kind -> (HTTP status, user-facing message)
SIGNUP_ERROR_RESPONSES: dict[SignupErrorKind, SignupErrorResponse] = {
    SignupErrorKind.DUPLICATE_KEY: SignupErrorResponse(
        409, "Duplicate username or email contained a duplicate key."
    ),
    SignupErrorKind.UNKNOWN_QUERY: SignupErrorResponse(
        500, "Database query contained an unspecified error."
    ),
    SignupErrorKind.UNKNOWN_DATABASE: SignupErrorResponse(
        500, "Database error, not query related."
    ),
}


class SignupError(RepositoryError):
    """
    Raised by the signup workflow once a storage failure has been classified.
    Status and message come straight from SIGNUP_ERROR_RESPONSES.
    """

    def __init__(self, kind: SignupErrorKind):
        self.kind = kind
        super().__init__(SIGNUP_ERROR_RESPONSES[kind].message, error_code=kind.value)

    def http_status(self) -> int:
        return SIGNUP_ERROR_RESPONSES[self.kind].status_code


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "StorageError",
    "SignupErrorKind",
    "SignupErrorResponse",
    "SIGNUP_ERROR_RESPONSES",
    "SignupError",
]
