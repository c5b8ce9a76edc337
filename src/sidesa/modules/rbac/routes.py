"""Role and permission management API routes.

Every endpoint requires the ``users.manage`` permission.
"""

from fastapi import Request, status

from sidesa.api.dependencies import DBSession
from sidesa.core.auth.dependencies import CurrentUser
from sidesa.core.permissions import catalog
from sidesa.core.permissions.catalog import MANAGE, USERS
from sidesa.core.permissions.decorators import require_permission
from sidesa.core.permissions.schemas import PermissionResponse
from sidesa.modules.rbac import router
from sidesa.modules.rbac.schemas import (
    PermissionCatalogResponse,
    RoleCreate,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
)
from sidesa.modules.rbac.services import RoleSvc
from sidesa.modules.users.schemas import UserResponse


@router.get(
    "/permissions",
    response_model=PermissionCatalogResponse,
    summary="List permission catalog",
    description="Returns every grantable permission, flat and grouped by resource.",
)
@require_permission(USERS, MANAGE)
async def list_permissions(
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> PermissionCatalogResponse:
    """List the permission catalog."""
    items = [PermissionResponse.from_catalog(p) for p in catalog.list_permissions()]
    by_resource = {
        resource: [PermissionResponse.from_catalog(p) for p in permissions]
        for resource, permissions in catalog.group_by_resource().items()
    }
    return PermissionCatalogResponse(
        items=items,
        by_resource=by_resource,
        total=len(items),
    )


@router.get(
    "/roles",
    response_model=RoleListResponse,
    summary="List roles",
    description="Returns all roles with their permissions and user counts.",
)
@require_permission(USERS, MANAGE)
async def list_roles(
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> RoleListResponse:
    """List all roles."""
    roles = await service.list_roles()
    return RoleListResponse(
        items=[RoleResponse.from_role(role, count) for role, count in roles],
        total=len(roles),
    )


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    description="Creates a role with at least one permission from the catalog.",
)
@require_permission(USERS, MANAGE)
async def create_role(
    data: RoleCreate,
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> RoleResponse:
    """Create a new role."""
    role = await service.create_role(
        name=data.name,
        description=data.description,
        permission_ids=data.permission_ids,
        actor_id=current_user.id,
    )
    return RoleResponse.from_role(role, user_count=0)


@router.get(
    "/roles/{name}",
    response_model=RoleResponse,
    summary="Get role",
    description="Returns a single role by name.",
)
@require_permission(USERS, MANAGE)
async def get_role(
    name: str,
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> RoleResponse:
    """Get a role by name."""
    role = await service.require_role(name)
    return RoleResponse.from_role(role, await service.count_users(role))


@router.put(
    "/roles/{name}",
    response_model=RoleResponse,
    summary="Update role permissions",
    description="Replaces the role's permission set. System roles cannot be modified.",
)
@require_permission(USERS, MANAGE)
async def update_role(
    name: str,
    data: RoleUpdate,
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> RoleResponse:
    """Update a role's permissions and description."""
    role = await service.update_role_permissions(
        name,
        permission_ids=data.permission_ids,
        description=data.description,
        actor_id=current_user.id,
    )
    return RoleResponse.from_role(role, await service.count_users(role))


@router.delete(
    "/roles/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    description="Deletes a role no user is assigned to. System roles cannot be deleted.",
)
@require_permission(USERS, MANAGE)
async def delete_role(
    name: str,
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> None:
    """Delete a role."""
    await service.delete_role(name, actor_id=current_user.id)


@router.get(
    "/roles/{name}/users",
    response_model=list[UserResponse],
    summary="List role users",
    description="Returns the users assigned to a role.",
)
@require_permission(USERS, MANAGE)
async def list_role_users(
    name: str,
    service: RoleSvc,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
) -> list[UserResponse]:
    """List users assigned to a role."""
    users = await service.list_role_users(name)
    return [UserResponse.model_validate(user) for user in users]
