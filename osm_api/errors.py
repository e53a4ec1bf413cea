# osm_api/errors.py
import asyncio
import logging
from typing import Any, Optional

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class OSMError(Exception):
    """Base error carrying the HTTP status and a stable error code."""

    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "The server encountered an unexpected error."

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(OSMError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Missing or malformed input."


class DuplicateIdentity(OSMError):
    status_code = 409
    error_code = "DUPLICATE_IDENTITY"
    default_message = "Username or email already exists"


class InvalidCredentials(OSMError):
    status_code = 401
    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid username or password"


class Unauthorized(OSMError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Could not validate credentials"


class InvalidToken(Unauthorized):
    error_code = "INVALID_TOKEN"
    default_message = "Invalid or expired session token"


class Forbidden(OSMError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(OSMError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class InvalidOrExpiredToken(OSMError):
    status_code = 400
    error_code = "INVALID_OR_EXPIRED_TOKEN"
    default_message = "Invalid or expired token"


class StoreUnavailable(OSMError):
    """The only condition a caller may safely retry."""

    status_code = 503
    error_code = "STORE_UNAVAILABLE"
    default_message = "The data store is temporarily unavailable, retry later."


# Failures of the connection itself, not of the statement
STORE_FAILURES = (
    asyncio.TimeoutError,
    asyncpg.PostgresConnectionError,
    asyncpg.InterfaceError,
    asyncpg.exceptions.QueryCanceledError,
    ConnectionError,
)


def _error_body(error_code: str, message: str, details: Any = None) -> dict:
    return {
        "success": False,
        "error_code": error_code,
        "message": message,
        "details": details,
    }


def _headers_for(exc: OSMError) -> Optional[dict]:
    if isinstance(exc, Unauthorized):
        return {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, StoreUnavailable):
        return {"Retry-After": "1"}
    return None


def error_response(exc: OSMError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error_code, exc.message, exc.details),
        headers=_headers_for(exc),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure with the same JSON shape."""

    @app.exception_handler(OSMError)
    async def osm_error_handler(request: Request, exc: OSMError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "VALIDATION_ERROR",
                "Invalid request parameters.",
                jsonable_errors(exc),
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("HTTP_ERROR", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    for failure in STORE_FAILURES:
        app.add_exception_handler(failure, store_failure_handler)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(OSMError())


async def store_failure_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Store failure on {request.url.path}: {exc!r}")
    return error_response(StoreUnavailable())


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raw exception object, which is not JSON serializable
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors
