"""Role and permission repositories for database operations."""

from uuid import UUID

from sqlalchemy import func, select

from sidesa.api.dependencies import DBSession
from sidesa.core.permissions.catalog import CatalogPermission
from sidesa.core.permissions.models import Permission, Role
from sidesa.modules.users.models import User


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, role: Role) -> Role:
        """Create a new role.

        Args:
            role: Role instance to create

        Returns:
            The created role with ID, timestamps and permissions loaded
        """
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_name(self, name: str) -> Role | None:
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_with_user_counts(self) -> list[tuple[Role, int]]:
        """List all roles by name, each with the number of users holding it."""
        user_count = (
            select(func.count(User.id))
            .where(User.role_id == Role.id)
            .correlate(Role)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(Role, user_count).order_by(Role.name)
        )
        return [(role, count) for role, count in result.all()]

    async def count_users(self, role_id: UUID) -> int:
        """Count users referencing a role, active or not."""
        stmt = select(func.count()).select_from(User).where(User.role_id == role_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def list_users(self, role_id: UUID) -> list[User]:
        result = await self.session.execute(
            select(User).where(User.role_id == role_id).order_by(User.username)
        )
        return list(result.scalars().all())

    async def update(self, role: Role) -> Role:
        """Flush pending changes and reload server-generated columns."""
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def delete(self, role: Role) -> None:
        """Delete a role. Its permission links go with it."""
        await self.session.delete(role)
        await self.session.flush()


class PermissionRepository:
    """Repository for Permission database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_keys(self, keys: list[tuple[str, str]]) -> list[Permission]:
        """Get permissions by (resource, action) pairs."""
        if not keys:
            return []
        wanted = set(keys)
        stmt = select(Permission).where(
            Permission.resource.in_({resource for resource, _ in wanted})
        )
        result = await self.session.execute(stmt)
        return [p for p in result.scalars().all() if p.key in wanted]

    async def ensure(self, permissions: list[CatalogPermission]) -> list[Permission]:
        """Return rows for catalog permissions, inserting any that are missing.

        Display names and descriptions of existing rows are refreshed
        from the catalog.

        Returns:
            Rows in the same order as ``permissions``
        """
        existing = {
            p.key: p for p in await self.get_by_keys([p.key for p in permissions])
        }

        rows: list[Permission] = []
        for entry in permissions:
            row = existing.get(entry.key)
            if row is None:
                row = Permission(
                    resource=entry.resource,
                    action=entry.action,
                    name=entry.name,
                    description=entry.description or None,
                )
                self.session.add(row)
                existing[entry.key] = row
            else:
                row.name = entry.name
                row.description = entry.description or None
            rows.append(row)

        await self.session.flush()
        return rows

