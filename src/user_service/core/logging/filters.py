# src/user_service/core/logging/filters.py
"""
Logging filters.

- RequestIdFilter: stamps `record.request_id` from a ContextVar set by
  RequestIDMiddleware, so every log line emitted while handling a request
  (routes, services, repositories, exception handlers) can be correlated.
  ContextVar rather than threading.local: concurrent requests share the event
  loop thread but each runs in its own context.
- RedactFilter: masks sensitive attributes passed through `extra={...}`.
  Users carry a plaintext password, so this one matters here.

Both always return True; they annotate records and never drop them.
"""

import logging
from logging import LogRecord
import contextvars

# Request id for the current execution context. None means "no request".
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context and return the token to allow reset.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token):
    """
    Reset the contextvar to the previously saved token returned by set_request_id().
    """
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Set `record.request_id` to, in order of preference:
      * an explicit value passed via `extra={"request_id": ...}`
      * the contextvar value set by the middleware
      * the sentinel "-" (keeps %(request_id)s format strings from failing)
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


# Redact sensitive information
class RedactFilter(logging.Filter):
    SENSITIVE = {"password","secret","token","access_token","refresh_token","ssn","authorization"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
