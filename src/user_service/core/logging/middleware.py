# src/user_service/core/logging/middleware.py
"""
Request ID middleware for FastAPI / Starlette.

For each request:
  1. take the incoming `X-Request-ID` header, or generate a UUID4;
  2. store it in the request-id contextvar (read by RequestIdFilter);
  3. call the app and copy the id onto the response's `X-Request-ID` header;
  4. reset the contextvar, even if the app raised.

Register it before CORSPolicyMiddleware so the CORS step stays outermost.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

# Longer incoming ids are replaced rather than logged.
_MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: Request) -> str | None:
    rid = request.headers.get("X-Request-ID")
    if not rid or len(rid) > _MAX_REQUEST_ID_LENGTH or not rid.isprintable():
        return None
    return rid


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        rid = _incoming_request_id(request) or str(uuid.uuid4())
        token = set_request_id(rid)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            reset_request_id(token)
