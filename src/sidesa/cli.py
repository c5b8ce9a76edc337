"""Management CLI for the village administration backend."""

import typer
from rich.console import Console

from sidesa import __version__
from sidesa.commands import admin, catalog_cmd, roles, seed
from sidesa.core.logging import configure_logging


console = Console()

app = typer.Typer(
    name="sidesa",
    help="Manage roles, permissions and administrator accounts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
app.command(name="seed")(seed.seed)
app.command(name="create-admin")(admin.create_admin)
app.command(name="roles")(roles.list_roles)
app.command(name="permissions")(catalog_cmd.list_permissions)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Sidesa CLI - manage roles, permissions and administrator accounts."""
    if version:
        console.print(f"[bold cyan]sidesa[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
