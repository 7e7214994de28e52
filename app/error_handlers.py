# app/error_handlers.py
"""
Global exception handlers.

- TrackerError           -> its own status and body (see app/errors.py)
- RequestValidationError -> 400 {"errors": [...]}, same shape as ValidationError
- Exception (catch-all)  -> 500 {"msg": "Server Error"}, no internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.errors import TrackerError, ValidationError

logger = logging.getLogger(__name__)

# FastAPI error locations start with where the value came from
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            "%s on %s: %s",
            exc.code,
            request.url.path,
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error on %s: %s",
            request.url.path,
            exc.errors(),
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        error = ValidationError(request_validation_errors(exc))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_response())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s: %s",
            request.url.path,
            exc,
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"msg": "Server Error"},
        )


def request_validation_errors(exc: RequestValidationError) -> list:
    """Convert FastAPI's error list into [{field, msg, location, value?}, ...]."""
    errors = []
    for e in exc.errors():
        loc = [str(part) for part in e.get("loc", ())]
        location = loc[0] if loc and loc[0] in _LOCATIONS else "body"
        if loc and loc[0] in _LOCATIONS:
            loc = loc[1:]
        msg = e.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        error = {"field": ".".join(loc) or location, "msg": msg, "location": location}
        if e.get("type") != "missing" and isinstance(e.get("input"), (str, int, float, bool)):
            error["value"] = e["input"]
        errors.append(error)
    return errors
