"""
Exception taxonomy for the accounts service and its HTTP rendering.
Every error response has the shape {"error": {code, message, details, path}},
including FastAPI's own HTTP and request validation errors.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class UserNotFoundException(EntityNotFoundException):
    """No user matches the given id or email."""


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class InvalidCredentialsException(UnauthorizedException):
    """Password did not verify against the stored hash."""
    def __init__(self, message: str = "Invalid password", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ConflictException(AppError):
    """Resource conflicts with an existing one."""
    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class UserAlreadyExistsException(ConflictException):
    """Registration email is already taken."""


class DuplicateEntityException(ConflictException):
    """The store rejected a write because of a unique constraint."""


class ValidationException(AppError):
    """Input failed a business precondition."""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class UserServiceException(AppError):
    """Unexpected failure inside the user service; wraps the original message."""
    def __init__(self, message: str = "User service error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render application errors; anything else becomes a generic 500."""

    if isinstance(exc, AppError):
        message = exc.message
        details = exc.details
        # Collaborator messages stay in the logs in production
        if exc.status_code >= 500 and get_settings().ENVIRONMENT == "production":
            message = GENERIC_ERROR_MESSAGE
            details = {}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.__class__.__name__,
                    "message": message,
                    "details": details,
                    "path": request.url.path,
                }
            },
        )

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": GENERIC_ERROR_MESSAGE,
                "path": request.url.path,
            }
        },
    )


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "path": request.url.path,
            }
        },
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException (auth failures, unknown routes) in the error envelope."""
    return error_response(
        request,
        exc.status_code,
        "HTTPException",
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "RequestValidationError",
        "Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )
