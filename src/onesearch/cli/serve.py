"""CLI command for running a OneSearch node.

Usage:
    onesearch serve
    onesearch serve --port 8080 --host 0.0.0.0
    onesearch serve --reload --log-level debug
"""

from __future__ import annotations

import typer

from onesearch.config import settings

app = typer.Typer(help="Run the OneSearch API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(
        settings.host,
        "--host",
        "-h",
        help="Host to bind to",
    ),
    port: int = typer.Option(
        settings.port,
        "--port",
        "-p",
        help="Port to listen on",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    access_log: bool = typer.Option(
        True,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Run the OneSearch API server.

    Starts uvicorn with the FastAPI application. A single worker is used:
    the in-memory store and cache are per process.
    """
    import uvicorn

    typer.echo("Starting OneSearch node...")
    typer.echo(f"  Site URL: {settings.site_url or '(unset)'}")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Store: {settings.store_backend}, cache: {settings.cache_backend}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="onesearch.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
        access_log=access_log,
    )
