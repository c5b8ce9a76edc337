"""Authentication API routes.

Provides endpoints for:
- Login
- Current user profile with effective permissions
- Password change
"""

from fastapi import APIRouter, status

from sidesa.api.dependencies import DBSession
from sidesa.core.auth.dependencies import CurrentUser
from sidesa.core.auth.service import AuthSvc
from sidesa.core.permissions.checker import PermissionGate
from sidesa.modules.users.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    TokenResponse,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with username and password",
    description="Authenticate with username (or email) and password to receive an access token.",
)
async def login(
    data: LoginRequest,
    service: AuthSvc,
) -> TokenResponse:
    """Login with username and password."""
    _user, token = await service.login(data.username, data.password)
    return token


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
    description="Returns the authenticated user's profile and effective permissions.",
)
async def get_me(
    current_user: CurrentUser,
    db: DBSession,
) -> MeResponse:
    """Get current user profile."""
    permissions = await PermissionGate(db).effective_permissions(current_user)
    profile = UserResponse.model_validate(current_user)
    return MeResponse(
        **profile.model_dump(),
        permissions=[p.id for p in permissions],
    )


@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    description="Change the current user's password. The current password must be supplied.",
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser,
    service: AuthSvc,
) -> None:
    """Change the current user's password."""
    await service.change_password(
        current_user,
        current_password=data.current_password,
        new_password=data.new_password,
    )
