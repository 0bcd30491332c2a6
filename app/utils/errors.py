# app/utils/errors.py
"""
Domain errors raised by the service layer.

Every error is an ``HTTPException`` so routers can let them propagate and FastAPI
renders ``{"detail": message}`` with the matching status code. Services raise
these instead of bare ``HTTPException`` so callers (and tests) can tell the
failure kinds apart.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "app_error"

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ValidationFailure(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_failure"


class NoTransitionAvailable(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "no_transition_available"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"


class StoreFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "store_failure"
