"""Command: sidesa create-admin - Create a user account from the shell."""

import asyncio

import typer
from rich.console import Console

from sidesa.core.audit.service import AuditRecorder
from sidesa.core.database import async_session_factory
from sidesa.core.errors import AppException
from sidesa.core.permissions.catalog import SUPER_ADMIN
from sidesa.modules.users.services import UserService


console = Console()


async def _create(
    username: str,
    email: str,
    full_name: str,
    password: str,
    role: str,
) -> str:
    async with async_session_factory() as session:
        service = UserService(session, AuditRecorder(session))
        user = await service.create_user(
            username=username,
            email=email,
            full_name=full_name,
            password=password,
            role=role,
        )
        await session.commit()
        return str(user.id)


def create_admin(
    username: str = typer.Argument(..., help="Login name for the new account"),
    email: str = typer.Argument(..., help="Email address"),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Account password",
    ),
    full_name: str = typer.Option(
        "Administrator", "--name", "-n", help="Full name"
    ),
    role: str = typer.Option(SUPER_ADMIN, "--role", "-r", help="Role name"),
) -> None:
    """Create a user account, by default a Super Admin.

    Run 'sidesa seed' first so that the role exists.
    """
    try:
        user_id = asyncio.run(_create(username, email, full_name, password, role))
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    console.print(
        f"[green]✓[/green] Created user [cyan]{username}[/cyan] "
        f"with role [bold]{role}[/bold] ({user_id})"
    )
