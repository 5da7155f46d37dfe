"""
Custom exceptions and error handlers for consistent error responses.

Every failure leaves the API in the same envelope:
    {"status": "fail", "message": "..."}   for client errors (4xx)
    {"status": "error", "message": "..."}  for server errors (5xx)
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("swiftdrop.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised when required fields are missing or malformed."""

    def __init__(self, message: str = "Missing required parcel fields", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class ParcelNotFoundError(ResourceNotFoundError):
    """Raised when no parcel matches a tracking or internal identifier."""

    def __init__(self, identifier: Any = None):
        super().__init__("Parcel", identifier)


class IllegalTransitionError(AppException):
    """Raised when a status change is not permitted from the current status."""

    def __init__(self, message: str = "Cannot cancel parcel after dispatch", current_status: Any = None):
        super().__init__(
            message=message,
            error_code="ERR_TRANSITION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current_status": current_status}
        )


class ConflictError(AppException):
    """Raised when a tracking identifier collides with an existing parcel."""

    def __init__(self, tracking_id: str):
        super().__init__(
            message="Tracking identifier already in use",
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"tracking_id": tracking_id}
        )


class StorageError(AppException):
    """Raised when the data store is unreachable or faulted."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(
            message=message,
            error_code="ERR_STORAGE_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


def error_envelope(status_code: int, message: str) -> Dict[str, Any]:
    """Build the failure body: 'fail' for client errors, 'error' for server errors."""
    return {
        "status": "error" if status_code >= 500 else "fail",
        "message": message,
    }


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            exc.error_code, request.method, request.url.path, exc.message,
            exc_info=exc,
        )
        # Storage faults never leak their detail
        message = "Server error"
    else:
        logger.info("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
        message = exc.message

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, message),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors, surfaced as 400 like any other bad input."""
    errors = exc.errors()
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in errors]
    message = "Validation error"
    if fields:
        message = f"Validation error: {', '.join(f for f in fields if f)}"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(status.HTTP_400_BAD_REQUEST, message),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception on %s %s: %s",
        request.method, request.url.path, type(exc).__name__,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error"),
    )
