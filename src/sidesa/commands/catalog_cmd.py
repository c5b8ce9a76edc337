"""Command: sidesa permissions - Show the static permission catalog."""

import typer
from rich.console import Console
from rich.table import Table

from sidesa.core.permissions import catalog


console = Console()


def list_permissions(
    resource: str | None = typer.Option(
        None, "--resource", "-r", help="Show only one resource"
    ),
) -> None:
    """List every grantable permission.

    Identifiers in the first column are what the role API accepts.
    """
    permissions = [
        p
        for p in catalog.list_permissions()
        if resource is None or p.resource == resource
    ]

    if not permissions:
        console.print(f"[yellow]No permissions for resource '{resource}'.[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Permission Catalog", show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description")

    for p in permissions:
        table.add_row(p.id, p.name, p.description)

    console.print()
    console.print(table)
    console.print()
