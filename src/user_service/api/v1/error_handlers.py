# user_service/api/v1/error_handlers.py
"""
FastAPI exception handlers that map service/repository exceptions to HTTP responses.

    - SignupError   -> 409 / 500, plain-text body (the classifier's fixed message)
    - NotFoundError -> 404, JSON payload
    - RepositoryError (incl. StorageError) -> status from the exception, JSON payload

Mapping lives in the exception classes (`http_status()`, `to_payload()`); the
handlers stay tiny. None of them ever echo raw storage text.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from user_service.exceptions.base import NotFoundError, RepositoryError, SignupError

logger = logging.getLogger(__name__)


# Most specific first (SignupError, NotFoundError), RepositoryError as the fallback.

async def signup_error_handler(request: Request, exc: SignupError) -> PlainTextResponse:
    logger.info(
        "SignupError for %s %s: kind=%s", request.method, request.url.path, exc.kind.value
    )
    return PlainTextResponse(exc.message, status_code=exc.http_status())


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("NotFoundError for %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    # The stack trace was already logged where the storage error was caught.
    logger.warning("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


# Helper to register all handlers on an app (called from create_app)
def register_exception_handlers(app):
    app.add_exception_handler(SignupError, signup_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
