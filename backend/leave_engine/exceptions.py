from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    code = "AppError"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad input shape or values. Nothing was mutated."""

    code = "ValidationError"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class NotFoundError(AppError):
    code = "NotFound"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class UnknownLeaveTypeError(NotFoundError):
    """The leave type does not exist within the caller's organisation."""

    code = "UnknownLeaveType"


class ForbiddenError(AppError):
    code = "Forbidden"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class ConflictError(AppError):
    """The write clashes with existing data, e.g. a duplicate name."""

    code = "Conflict"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class InvalidTransitionError(AppError):
    """The request's current status does not allow the requested action."""

    code = "InvalidTransition"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class InsufficientBalanceError(AppError):
    """Balance check failed and no override was given.

    Kept apart from ValidationError so clients can offer the override path.
    """

    code = "InsufficientBalance"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class ConcurrentModificationError(AppError):
    """Another writer changed the same balance first. Safe to retry."""

    code = "ConcurrentModification"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.code,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error=ValidationError.code,
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
