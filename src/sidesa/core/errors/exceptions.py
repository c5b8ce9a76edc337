"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Role not found", resource="role", resource_id=name)
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Role already exists", details={"name": name})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Unknown permissions",
            errors=[{"field": "permission_ids", "message": "Unknown: foo.bar"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class UnauthenticatedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Example:
        raise UnauthenticatedError("Invalid access token")
    """

    message = "Authentication required"
    error_code = "unauthenticated"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when an operation is not allowed regardless of the caller.

    Example:
        raise ForbiddenError("Cannot delete system role", error_code="system_role")
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class PermissionDeniedError(ForbiddenError):
    """Raised by the permission gate when a user lacks a permission.

    Example:
        raise PermissionDeniedError(
            details={"required_permission": "citizens.delete"}
        )
    """

    message = "Permission denied"
    error_code = "permission_denied"


class UnavailableError(AppException):
    """Raised when a backing service (usually the database) fails.

    Mapped to a generic 500 so storage failures are never mistaken
    for authorization decisions.

    Example:
        raise UnavailableError("Permission store unavailable")
    """

    message = "Service temporarily unavailable"
    error_code = "unavailable"
    status_code = 500
