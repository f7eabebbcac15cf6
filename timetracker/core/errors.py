"""
Application error taxonomy and the FastAPI handlers that render it.

Every error leaves the API as ``{"error": "<message>"}`` with the status
code carried by the exception.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class TimeTrackerError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TimeTrackerError):
    """A required field is missing or invalid."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(TimeTrackerError):
    """Credential missing, malformed or expired."""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(TimeTrackerError):
    """Caller is authenticated but lacks the role or membership."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(TimeTrackerError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(TimeTrackerError):
    status_code = status.HTTP_409_CONFLICT


class ErrorResponse(JSONResponse):
    """JSON response carrying a single error message."""

    def __init__(self, status_code: int, message: str, headers=None):
        super().__init__({"error": message}, status_code=status_code, headers=headers)


async def time_tracker_error_handler(request: Request, exc: TimeTrackerError):
    if exc.status_code >= 500:
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc.message)
    return ErrorResponse(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return ErrorResponse(exc.status_code, detail, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location}: {first.get('msg')}" if location else f"Invalid request: {first.get('msg')}"
    return ErrorResponse(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return ErrorResponse(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(TimeTrackerError, time_tracker_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
