"""CLI command for checking the encryption secrets.

Usage:
    onesearch secret check
"""

from __future__ import annotations

import typer

from onesearch.config import Settings
from onesearch.errors import InsecureSecretError
from onesearch.security.secrets import SecretStore

app = typer.Typer(help="Check the encryption secrets", no_args_is_help=True)


@app.command("check")
def check() -> None:
    """Report whether insecure fallback secrets are in use.

    Exits non-zero when fallbacks are in use.
    """
    from rich.console import Console

    console = Console()
    config = Settings()

    try:
        store = SecretStore.from_settings(config)
    except InsecureSecretError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from None

    if store.insecure:
        console.print("[yellow]Insecure fallback encryption secrets are in use.[/yellow]")
        console.print("Set ONESEARCH_ENCRYPTION_KEY and ONESEARCH_ENCRYPTION_SALT.")
        raise typer.Exit(code=1)

    console.print("[green]Encryption secrets are configured.[/green]")
