"""
Name: FastAPI Exception Handlers

Responsibilities:
  - Convert domain exceptions to RFC 7807 responses
  - Turn request validation failures into 400 Bad Request
  - Keep internal details out of 500 bodies (logged with an error_id instead)

Collaborators:
  - main.py: Registers these handlers
  - exceptions.py: ValidationError, NotFoundError, ConflictError, DatabaseError
  - error_responses.py: Problem Details rendering

Constraints:
  - 404/400/409 carry the domain message, 500 never does
"""

from uuid import uuid4

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from .error_responses import (
    AppHTTPException,
    ErrorCode,
    LoginRedirect,
    app_exception_handler,
    conflict,
    internal_error,
    validation_error,
)
from .exceptions import (
    ConflictError,
    DatabaseError,
    EmployeeAPIError,
    NotFoundError,
    SessionStoreError,
    ValidationError,
)
from .logger import logger


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    app_exc = AppHTTPException(404, ErrorCode.NOT_FOUND, exc.message)
    return await app_exception_handler(request, app_exc)


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return await app_exception_handler(request, validation_error(exc.message))


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return await app_exception_handler(request, conflict(exc.message))


async def internal_error_handler(
    request: Request, exc: EmployeeAPIError
) -> JSONResponse:
    """Handle database/session store errors with a generic body."""
    logger.error(
        "Internal error",
        extra={
            "error_id": exc.error_id,
            "error_code": exc.error_code,
            "error_message": exc.message,
        },
    )
    return await app_exception_handler(request, internal_error(error_id=exc.error_id))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies, missing fields and non-numeric ids become 400."""
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return await app_exception_handler(
        request, validation_error("Request validation failed", errors)
    )


async def login_redirect_handler(request: Request, exc: LoginRedirect) -> RedirectResponse:
    return RedirectResponse(url=exc.location, status_code=302)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with stack trace, answer with a generic 500."""
    error_id = str(uuid4())
    logger.error("Unhandled exception", exc_info=exc, extra={"error_id": error_id})
    return await app_exception_handler(request, internal_error(error_id=error_id))


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Usage:
        from .exception_handlers import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(DatabaseError, internal_error_handler)
    app.add_exception_handler(SessionStoreError, internal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(LoginRedirect, login_redirect_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
