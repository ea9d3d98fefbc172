"""
Cross-origin policy applied to every response the service sends.

`apply_cors_headers` is the whole policy: a pure function over the request's
Origin value and a response header mapping. `CORSPolicyMiddleware` only calls it
after the downstream app has produced a response, whatever the route, status or
outcome. Registered last in `create_app()` so it wraps everything else.

Unlike Starlette's CORSMiddleware, nothing is negotiated: there is no origin
allow-list and no preflight short-circuit. The same four headers go out on
every response.
"""

import logging
from collections.abc import MutableMapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse

logger = logging.getLogger(__name__)

ALLOW_METHODS = "POST, GET, PATCH, OPTIONS"
ALLOW_HEADERS = "*"
ALLOW_CREDENTIALS = "true"


def apply_cors_headers(origin: str | None, headers: MutableMapping[str, str]) -> None:
    """
    Set the access-control headers on `headers` in place.

    - Allow-Origin echoes the request Origin, or "*" when the request had none.
    - Methods, headers and credentials are fixed.

    Idempotent: applying it twice leaves the same four values.
    """
    headers["Access-Control-Allow-Origin"] = origin or "*"
    headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
    headers["Access-Control-Allow-Credentials"] = ALLOW_CREDENTIALS


class CORSPolicyMiddleware(BaseHTTPMiddleware):
    """
    Outermost user middleware. Exceptions no handler turned into a response
    would otherwise reach Starlette's ServerErrorMiddleware, which sits outside
    this layer; they are rendered here as a bare 500 so the headers still apply.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error for %s %s", request.method, request.url.path)
            response = PlainTextResponse("Internal Server Error", status_code=500)
        apply_cors_headers(request.headers.get("origin"), response.headers)
        return response
