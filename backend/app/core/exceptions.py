"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, List

logger = logging.getLogger("geotracking.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class RecordValidationError(AppException):
    """
    Raised when a payload fails one or more field constraints.

    Carries every failing field, never just the first one.
    """

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid data provided"):
        self.errors = errors
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": errors}
        )

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a referenced user does not exist."""

    def __init__(self, user_id: int):
        super().__init__("User", user_id)


class RecordNotFoundError(ResourceNotFoundError):
    """Raised when a geo-tracking record does not exist at apply time."""

    def __init__(self, record_id: int):
        super().__init__("Geo-tracking record", record_id)


class StorageError(AppException):
    """Raised when the storage backend is unavailable or an operation failed."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(
            message=message,
            error_code="ERR_STORAGE",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for framework-level request errors (malformed JSON and the like)."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())) or "body",
            "reason": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Invalid data provided",
            "details": {
                "errors": errors
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception: %s: %s", type(exc).__name__, exc,
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
