"""Role store: business logic for roles and their permission sets."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from sidesa.api.dependencies import DBSession
from sidesa.core.audit.service import Auditor
from sidesa.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from sidesa.core.permissions import catalog
from sidesa.core.permissions.catalog import SYSTEM_ROLES, CatalogPermission
from sidesa.core.permissions.models import Permission, Role
from sidesa.modules.rbac.repos import PermissionRepository, RoleRepository
from sidesa.modules.users.models import User


logger = structlog.get_logger()

ROLES = "roles"


class RoleService:
    """Service for role management operations.

    Roles are addressed by name. The built-in roles listed in
    ``SYSTEM_ROLES`` can be read but never edited or deleted here.
    Every mutation is written to the audit trail in the same
    transaction.
    """

    def __init__(self, db: DBSession, auditor: Auditor) -> None:
        self.db = db
        self.auditor = auditor
        self.role_repo = RoleRepository(db)
        self.permission_repo = PermissionRepository(db)

    async def list_roles(self) -> list[tuple[Role, int]]:
        """List all roles with the number of users assigned to each."""
        return await self.role_repo.list_with_user_counts()

    async def get_role(self, name: str) -> Role | None:
        return await self.role_repo.get_by_name(name)

    async def require_role(self, name: str) -> Role:
        """Get a role by name.

        Raises:
            NotFoundError: If the role doesn't exist
        """
        role = await self.role_repo.get_by_name(name)
        if not role:
            raise NotFoundError(
                f"Role '{name}' not found",
                resource="role",
                resource_id=name,
            )
        return role

    async def count_users(self, role: Role) -> int:
        return await self.role_repo.count_users(role.id)

    async def list_role_users(self, name: str) -> list[User]:
        """List users assigned to a role.

        Raises:
            NotFoundError: If the role doesn't exist
        """
        role = await self.require_role(name)
        return await self.role_repo.list_users(role.id)

    async def create_role(
        self,
        name: str,
        description: str,
        permission_ids: list[str],
        actor_id: UUID | None = None,
    ) -> Role:
        """Create a role with the given permissions.

        Raises:
            ConflictError: If the name is taken or imitates a system role
            ValidationError: If the permission list is empty or has unknown entries
        """
        system_role = catalog.get_system_role(name)
        if system_role is not None:
            raise ConflictError(
                f"Role '{name}' clashes with system role '{system_role.name}'",
                error_code="role_exists",
                details={"name": name},
            )

        if await self.role_repo.get_by_name(name):
            raise ConflictError(
                f"Role '{name}' already exists",
                error_code="role_exists",
                details={"name": name},
            )

        permissions = await self._resolve_permissions(permission_ids)

        try:
            role = await self.role_repo.create(
                Role(name=name, description=description, permissions=permissions)
            )
        except IntegrityError as exc:
            raise ConflictError(
                f"Role '{name}' already exists",
                error_code="role_exists",
                details={"name": name},
            ) from exc

        await self.auditor.record(
            actor_id=actor_id,
            action="create_role",
            resource=ROLES,
            resource_id=name,
            description=f"Created role: {name}",
            metadata={"permissions": sorted(p.permission_id for p in permissions)},
        )
        logger.info("role_created", role=name, permission_count=len(permissions))
        return role

    async def update_role_permissions(
        self,
        name: str,
        permission_ids: list[str],
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> Role:
        """Replace a role's permission set and optionally its description.

        Raises:
            ForbiddenError: If the role is a system role
            NotFoundError: If the role doesn't exist
            ValidationError: If the permission list is empty or has unknown entries
        """
        self._guard_system_role(name, "modified")
        role = await self.require_role(name)
        permissions = await self._resolve_permissions(permission_ids)

        previous = sorted(p.permission_id for p in role.permissions)
        role.permissions = permissions
        if description is not None:
            role.description = description
        role = await self.role_repo.update(role)

        await self.auditor.record(
            actor_id=actor_id,
            action="update_role",
            resource=ROLES,
            resource_id=name,
            description=f"Updated role: {name}",
            metadata={
                "previous_permissions": previous,
                "permissions": sorted(p.permission_id for p in permissions),
            },
        )
        logger.info("role_updated", role=name, permission_count=len(permissions))
        return role

    async def delete_role(self, name: str, actor_id: UUID | None = None) -> None:
        """Delete a role that no user references.

        Raises:
            ForbiddenError: If the role is a system role
            NotFoundError: If the role doesn't exist
            ConflictError: If any user, active or not, holds the role
        """
        self._guard_system_role(name, "deleted")
        role = await self.require_role(name)

        user_count = await self.role_repo.count_users(role.id)
        if user_count:
            raise self._users_assigned(name, user_count)

        try:
            await self.role_repo.delete(role)
        except IntegrityError as exc:
            # A user was assigned between the count and the delete
            raise self._users_assigned(name, None) from exc

        await self.auditor.record(
            actor_id=actor_id,
            action="delete_role",
            resource=ROLES,
            resource_id=name,
            description=f"Deleted role: {name}",
        )
        logger.info("role_deleted", role=name)

    async def sync_catalog(self) -> list[Permission]:
        """Make the permissions table match the static catalog.

        Rows are inserted for new catalog entries and labels are
        refreshed for existing ones. Running it again changes nothing.
        """
        rows = await self.permission_repo.ensure(list(catalog.list_permissions()))
        logger.info("permission_catalog_synced", count=len(rows))
        return rows

    async def seed_system_roles(self) -> list[Role]:
        """Create the system roles, or reset them to their default permission sets."""
        await self.sync_catalog()

        roles: list[Role] = []
        for definition in catalog.SYSTEM_ROLE_DEFINITIONS:
            permissions = await self.permission_repo.ensure(
                self._catalog_entries(list(definition.permission_ids))
            )
            role = await self.role_repo.get_by_name(definition.name)
            if role is None:
                role = await self.role_repo.create(
                    Role(
                        name=definition.name,
                        description=definition.description,
                        permissions=permissions,
                    )
                )
            else:
                role.description = definition.description
                role.permissions = permissions
                role = await self.role_repo.update(role)
            roles.append(role)

        await self.auditor.record(
            actor_id=None,
            action="seed_roles",
            resource=ROLES,
            description="Seeded system roles",
            metadata={"roles": [r.name for r in roles]},
        )
        logger.info("system_roles_seeded", roles=[r.name for r in roles])
        return roles

    async def _resolve_permissions(self, permission_ids: list[str]) -> list[Permission]:
        """Turn "resource.action" identifiers into permission rows.

        Raises:
            ValidationError: If the list is empty or references unknown permissions
        """
        if not permission_ids:
            raise ValidationError(
                "At least one permission is required",
                errors=[
                    {
                        "field": "permission_ids",
                        "message": "At least one permission is required",
                    }
                ],
            )

        unknown = catalog.unknown_permission_ids(permission_ids)
        if unknown:
            raise ValidationError(
                "Unknown permissions",
                errors=[
                    {"field": "permission_ids", "message": f"Unknown permission: {pid}"}
                    for pid in unknown
                ],
            )

        # Duplicates collapse, the set semantics of a role
        unique_ids = list(dict.fromkeys(permission_ids))
        return await self.permission_repo.ensure(self._catalog_entries(unique_ids))

    @staticmethod
    def _catalog_entries(permission_ids: list[str]) -> list[CatalogPermission]:
        entries = []
        for pid in permission_ids:
            entry = catalog.get_permission(pid)
            if entry is not None:
                entries.append(entry)
        return entries

    @staticmethod
    def _guard_system_role(name: str, verb: str) -> None:
        if name in SYSTEM_ROLES:
            raise ForbiddenError(
                f"System role '{name}' cannot be {verb}",
                error_code="system_role",
                details={"role": name},
            )

    @staticmethod
    def _users_assigned(name: str, user_count: int | None) -> ConflictError:
        details: dict[str, object] = {"role": name}
        if user_count is not None:
            details["user_count"] = user_count
        return ConflictError(
            f"Role '{name}' cannot be deleted: users assigned",
            error_code="users_assigned",
            details=details,
        )


# Type alias for dependency injection
RoleSvc = Annotated[RoleService, Depends(RoleService)]
