"""Custom error handlers and exceptions for the application."""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import traceback
from typing import Union

from .logging_config import get_logger

logger = get_logger("error_handlers")


class AppException(Exception):
    """Base exception for application-specific errors."""

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(AppException):
    """Raised when a requested resource is missing or inactive."""

    def __init__(self, resource: str, identifier: Union[int, str]):
        super().__init__(
            message=f"{resource} with identifier '{identifier}' not found",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class DuplicateResourceError(AppException):
    """Raised when attempting to create a duplicate resource."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            status_code=409,
            details={"resource": resource, "field": field, "value": value}
        )


class ValidationError(AppException):
    """Raised when data validation fails."""

    def __init__(self, message: str, field: str = None, errors: list = None):
        errors = list(errors or [])
        if field and not errors:
            errors.append({"field": field, "message": message})
        super().__init__(
            message=message,
            status_code=422,
            details={"field": field, "validation_errors": errors}
        )


class InsufficientStockError(AppException):
    """Raised when an exit or loan line asks for more than is in stock."""

    def __init__(self, item_id, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            message=f"Insufficient stock. Available: {available}",
            status_code=409,
            details={
                "item_id": str(item_id),
                "available": available,
                "requested": requested
            }
        )


class InvalidStateError(AppException):
    """Raised when a transition is not allowed from the current state."""

    def __init__(self, resource: str, current_state: str, action: str):
        super().__init__(
            message=f"Cannot {action} {resource} in state '{current_state}'",
            status_code=409,
            details={"resource": resource, "state": current_state, "action": action}
        )


class UnauthenticatedError(AppException):
    """Raised when an operation needs an acting user and has none."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, status_code=401)


class PermissionDeniedError(AppException):
    """Raised when the acting user's role does not allow the operation."""

    def __init__(self, role: str, required: list[str]):
        super().__init__(
            message="Insufficient permissions",
            status_code=403,
            details={"role": role, "required": required}
        )


class TransactionFailureError(AppException):
    """Raised when an atomic write could not complete. Nothing was applied."""

    def __init__(self, operation: str, original_error: str = None):
        # Driver messages carry SQL and parameters; they go to the log only
        self.original_error = original_error
        super().__init__(
            message=f"Transaction failed: {operation}",
            status_code=500,
            details={"operation": operation}
        )


async def app_exception_handler(request: Request, exc: AppException):
    """Handler for custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application error: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details
        }
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details,
            "path": request.url.path
        },
        headers=headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"validation_errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation failed",
            "validation_errors": errors,
            "path": request.url.path
        }
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handler for SQLAlchemy database errors."""
    error_msg = "Database error occurred"

    if isinstance(exc, IntegrityError):
        error_msg = "Data integrity constraint violated"
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.error(
        f"Database error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_msg,
            "detail": str(exc.orig) if hasattr(exc, 'orig') else str(exc),
            "path": request.url.path
        }
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handler for unexpected exceptions."""
    logger.critical(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc()
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please contact support if the issue persists.",
            "path": request.url.path,
            "request_id": id(request)
        }
    )
