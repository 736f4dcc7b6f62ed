"""CLI commands for the node role.

Usage:
    onesearch role show
    onesearch role set brand-site
    onesearch role set governing-site --force
"""

from __future__ import annotations

import typer

from onesearch.cli._runtime import run_with_container
from onesearch.container import Container
from onesearch.errors import RoleLockedError
from onesearch.models import SiteRole

app = typer.Typer(help="Show or set the node role", no_args_is_help=True)


@app.command("show")
def show() -> None:
    """Print the current role."""

    async def _show(container: Container) -> SiteRole:
        return await container.options.get_site_role()

    typer.echo(run_with_container(_show).value)


@app.command("set")
def set_role(
    role: str = typer.Argument(..., help="brand-site, governing-site or unset"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Change a role that has already been chosen",
    ),
) -> None:
    """Choose the node role. Changing an existing role needs --force."""
    from rich.console import Console

    console = Console()

    try:
        requested = SiteRole(role)
    except ValueError:
        console.print(f"[red]Unknown role:[/red] {role}")
        raise typer.Exit(code=2) from None

    async def _set(container: Container) -> SiteRole:
        return await container.options.set_site_role(requested, force=force)

    try:
        result = run_with_container(_set)
    except RoleLockedError as e:
        console.print(f"[red]Refused:[/red] {e.message}")
        console.print("Re-run with --force to change it anyway.")
        raise typer.Exit(code=1) from None

    console.print(f"[green]Role set:[/green] {result.value}")
