"""CLI commands for this brand node's shared token.

Usage:
    onesearch token show
    onesearch token regenerate
"""

from __future__ import annotations

import typer

from onesearch.cli._runtime import run_with_container
from onesearch.container import Container
from onesearch.models import SiteRole

app = typer.Typer(help="Show or regenerate the shared token", no_args_is_help=True)


def _require_brand(role: SiteRole) -> None:
    if role != SiteRole.BRAND:
        typer.echo(f"Shared tokens belong to brand sites; this node is '{role.value}'.", err=True)
        raise typer.Exit(code=1)


@app.command("show")
def show() -> None:
    """Print the shared token, generating one if none exists."""

    async def _show(container: Container) -> tuple[SiteRole, str]:
        role = await container.options.get_site_role()
        if role != SiteRole.BRAND:
            return role, ""
        return role, await container.options.ensure_api_key()

    role, token = run_with_container(_show)
    _require_brand(role)
    typer.echo(token)


@app.command("regenerate")
def regenerate(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
) -> None:
    """Replace the shared token. The governing site must be updated afterwards."""
    if not yes:
        typer.confirm("The governing site will lose access until updated. Continue?", abort=True)

    async def _regenerate(container: Container) -> tuple[SiteRole, str]:
        role = await container.options.get_site_role()
        if role != SiteRole.BRAND:
            return role, ""
        return role, await container.options.regenerate_api_key()

    role, token = run_with_container(_regenerate)
    _require_brand(role)
    typer.echo(token)
