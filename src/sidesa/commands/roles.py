"""Command: sidesa roles - Show roles with permission and user counts."""

import asyncio

from rich.console import Console
from rich.table import Table

from sidesa.core.audit.service import AuditRecorder
from sidesa.core.database import async_session_factory
from sidesa.core.permissions import catalog
from sidesa.modules.rbac.services import RoleService


console = Console()


async def _load() -> list[tuple[str, str, int, int]]:
    async with async_session_factory() as session:
        service = RoleService(session, AuditRecorder(session))
        roles = await service.list_roles()
        return [
            (role.name, role.description or "", len(role.permissions), count)
            for role, count in roles
        ]


def list_roles() -> None:
    """List roles stored in the database."""
    rows = asyncio.run(_load())

    if not rows:
        console.print("[yellow]No roles found. Run 'sidesa seed' first.[/yellow]")
        return

    table = Table(title="Roles", show_header=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Permissions", style="green", justify="right")
    table.add_column("Users", justify="right")
    table.add_column("System", no_wrap=True)

    for name, description, permission_count, user_count in rows:
        table.add_row(
            name,
            description,
            str(permission_count),
            str(user_count),
            "[green]yes[/green]" if catalog.is_system_role(name) else "",
        )

    console.print()
    console.print(table)
    console.print()
