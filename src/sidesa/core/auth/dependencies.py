"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Extracting and validating JWT bearer tokens
- Getting the current authenticated user
"""

from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sidesa.api.dependencies import DBSession
from sidesa.core.auth.backend import decode_token
from sidesa.core.auth.schemas import TokenData
from sidesa.core.errors import ForbiddenError, UnauthenticatedError


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthenticatedError: If token is missing or invalid
    """
    if not credentials:
        raise UnauthenticatedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthenticatedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != "access":
        raise UnauthenticatedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
    request: Request,
) -> Any:  # Returns User, but use Any to avoid circular import
    """Get the currently authenticated user.

    The user's ID is attached to the request state and the logging
    context so request logs and audit entries can name the actor.

    Raises:
        UnauthenticatedError: If the user no longer exists
        ForbiddenError: If the account is deactivated
    """
    from sidesa.modules.users.repos import UserRepository  # noqa: PLC0415

    repo = UserRepository(db)
    user = await repo.get_by_id(token_data.user_id)

    if not user:
        raise UnauthenticatedError(
            "User not found",
            error_code="user_not_found",
        )

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=str(user.id))

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    return user


# Type alias for cleaner dependency injection
# Use Any for User type to avoid circular imports at runtime
CurrentUser = Annotated[Any, Depends(get_current_user)]
