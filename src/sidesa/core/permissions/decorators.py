"""Permission decorators for route protection.

This module provides a decorator that can be applied to FastAPI
routes to require a specific permission.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

from sidesa.core.audit.service import AuditContext, AuditRecorder
from sidesa.core.errors import UnauthenticatedError, UnavailableError
from sidesa.core.permissions.checker import PermissionGate


if TYPE_CHECKING:
    from fastapi import Request
    from sqlalchemy.ext.asyncio import AsyncSession

    from sidesa.modules.users.models import User


P = ParamSpec("P")
R = TypeVar("R")


def _get_user_and_db(
    kwargs: dict[str, Any],
) -> tuple["User | None", "AsyncSession | None", "Request | None"]:
    """Extract user, db session, and request from kwargs."""
    user = cast("User | None", kwargs.get("current_user"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    request = cast("Request | None", kwargs.get("request"))
    return user, db, request


def require_permission(
    resource: str, action: str
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    The route must accept ``current_user`` and ``db`` keyword arguments.
    If it also accepts ``request``, denials are audited with the request
    ID and client IP.

    Usage:
        @router.delete("/{user_id}")
        @require_permission("users", "delete")
        async def delete_user(user_id: UUID, current_user: CurrentUser, db: DBSession):
            ...

    Args:
        resource: The resource being accessed (e.g., "citizens")
        action: The action being performed (e.g., "delete")

    Returns:
        Decorator function

    Raises:
        UnauthenticatedError: If there is no authenticated user
        PermissionDeniedError: If the user lacks the required permission
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, db, request = _get_user_and_db(kwargs)

            if not user:
                raise UnauthenticatedError()

            if not db:
                raise UnavailableError(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            recorder = AuditRecorder(db, AuditContext.from_request(request))
            gate = PermissionGate(db, recorder)
            await gate.require_permission(user, resource, action)

            return await func(*args, **kwargs)

        return wrapper

    return decorator
