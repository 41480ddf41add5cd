"""
Error types and secure error handling

Domain errors raised by the stores, plus FastAPI exception handlers that turn
them (and framework/database errors) into consistent JSON payloads without
leaking sensitive information.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    category = "validation"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    category = "security"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "not_found"


class Conflict(ServiceError):
    """A unique value could not be claimed; the caller may retry."""

    status_code = status.HTTP_409_CONFLICT
    category = "conflict"


class PayloadTooLarge(ServiceError):
    status_code = 413
    category = "validation"


class StorageError(ServiceError):
    """The backing store failed. Message is always generic."""

    category = "database"


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Create post")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def error_response(message: str, category: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid value for '{location}': {first.get('msg', 'invalid')}"
    return first.get("msg", "Invalid request")


def setup_error_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on an app."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return error_response(exc.message, exc.category, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            message=_validation_message(exc),
            category="validation",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        detail = exc.detail
        message = (
            detail.get("message") if isinstance(detail, dict) else str(detail)
        ) or "Request failed."
        category = detail.get("category") if isinstance(detail, dict) else None

        if not category:
            if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
                category = "security"
            elif exc.status_code >= 500:
                category = "server_error"
            else:
                category = "client_error"

        return error_response(message, category, exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        message, _ = log_and_sanitize_error(
            exc,
            f"Database operation on {request.url.path}",
            "A database error occurred while processing the request.",
        )
        return error_response(message, StorageError.category, StorageError.status_code)

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path, exc_info=exc)
        return error_response(
            message="An unexpected server error occurred. Please try again later.",
            category="server_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
