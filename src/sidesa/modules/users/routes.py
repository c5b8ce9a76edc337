"""User management API routes."""

from uuid import UUID

from fastapi import Query, Request, status

from sidesa.api.dependencies import DBSession
from sidesa.core.auth.dependencies import CurrentUser
from sidesa.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from sidesa.core.permissions.catalog import CREATE, DELETE, READ, UPDATE, USERS
from sidesa.core.permissions.checker import PermissionGate
from sidesa.core.permissions.decorators import require_permission
from sidesa.core.permissions.schemas import PermissionResponse
from sidesa.modules.users import router
from sidesa.modules.users.schemas import (
    UserCreate,
    UserListResponse,
    UserPermissionsResponse,
    UserResponse,
    UserStatus,
    UserStatusUpdate,
    UserUpdate,
)
from sidesa.modules.users.services import UserSvc


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="Returns users, newest first, filtered by search text, role name and status.",
)
@require_permission(USERS, READ)
async def list_users(
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
    search: str | None = Query(None, description="Matches username, email or name"),
    role: str | None = Query(None, description="Exact role name"),
    status_filter: UserStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> UserListResponse:
    """List users with filtering and pagination."""
    is_active = None if status_filter is None else status_filter == UserStatus.ACTIVE
    users, total = await service.list_users(
        search=search,
        role=role,
        is_active=is_active,
        page=page,
        page_size=page_size,
    )
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Creates an active user holding the given role.",
)
@require_permission(USERS, CREATE)
async def create_user(
    data: UserCreate,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> UserResponse:
    """Create a new user."""
    user = await service.create_user(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        password=data.password,
        role=data.role,
        actor_id=current_user.id,
    )
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
@require_permission(USERS, READ)
async def get_user(
    user_id: UUID,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> UserResponse:
    """Get a user by ID."""
    return UserResponse.model_validate(await service.get_user(user_id))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
    description="Updates name, email or role. Omitted fields are left unchanged.",
)
@require_permission(USERS, UPDATE)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> UserResponse:
    """Update a user."""
    user = await service.update_user(
        user_id,
        email=data.email,
        full_name=data.full_name,
        role=data.role,
        actor_id=current_user.id,
    )
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}/status",
    response_model=UserResponse,
    summary="Activate or deactivate user",
)
@require_permission(USERS, UPDATE)
async def set_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> UserResponse:
    """Activate or deactivate a user."""
    user = await service.set_status(
        user_id,
        is_active=data.is_active,
        actor_id=current_user.id,
    )
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Deactivates the account. Users are never hard deleted.",
)
@require_permission(USERS, DELETE)
async def delete_user(
    user_id: UUID,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> None:
    """Soft delete a user."""
    await service.deactivate_user(user_id, actor_id=current_user.id)


@router.get(
    "/{user_id}/permissions",
    response_model=UserPermissionsResponse,
    summary="Get user permissions",
    description="Returns the permissions the user's role currently grants.",
)
@require_permission(USERS, READ)
async def get_user_permissions(
    user_id: UUID,
    service: UserSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> UserPermissionsResponse:
    """Get a user's effective permissions."""
    user = await service.get_user(user_id)
    permissions = await PermissionGate(db).effective_permissions(user)
    return UserPermissionsResponse(
        user_id=user.id,
        role=user.role.name,
        permissions=[PermissionResponse.from_catalog(p) for p in permissions],
    )
