"""Error handling module with RFC 7807 Problem Details."""

from sidesa.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
    UnavailableError,
    ValidationError,
)
from sidesa.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AppException",
    "ConflictError",
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProblemDetail",
    "UnauthenticatedError",
    "UnavailableError",
    "ValidationError",
    "register_exception_handlers",
]
