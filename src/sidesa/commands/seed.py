"""Command: sidesa seed - Sync the permission catalog and system roles."""

import asyncio

from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession

from sidesa.core.audit.service import AuditRecorder
from sidesa.core.database import async_session_factory
from sidesa.core.permissions.models import Role
from sidesa.modules.rbac.services import RoleService


console = Console()


async def run_seed(session: AsyncSession) -> list[Role]:
    """Sync the catalog and reset system roles inside ``session``.

    The caller commits.
    """
    service = RoleService(session, AuditRecorder(session))
    return await service.seed_system_roles()


async def _seed() -> list[tuple[str, int]]:
    async with async_session_factory() as session:
        roles = await run_seed(session)
        summary = [(role.name, len(role.permissions)) for role in roles]
        await session.commit()
    return summary


def seed() -> None:
    """Seed the permission catalog and the built-in roles.

    Safe to run repeatedly: missing permissions are added and the
    system roles are reset to their default permission sets.
    """
    summary = asyncio.run(_seed())

    console.print("[green]✓[/green] Permission catalog synced")
    for name, count in summary:
        console.print(f"[green]✓[/green] {name}: {count} permissions")
