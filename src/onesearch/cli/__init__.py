"""CLI commands for OneSearch.

Provides command-line interface using Typer:
- onesearch serve: Run the node's API server
- onesearch role: Show or set the node role
- onesearch token: Show or regenerate this brand node's shared token
- onesearch secret: Check the encryption secrets in use

Usage:
    onesearch --help
    onesearch serve --port 8080
    onesearch role set governing-site
    onesearch token regenerate
"""

import typer

from onesearch.cli.role_cmd import app as role_app
from onesearch.cli.secret_cmd import app as secret_app
from onesearch.cli.serve import app as serve_app
from onesearch.cli.token_cmd import app as token_app

app = typer.Typer(
    name="onesearch",
    help="OneSearch: federated search credentials for governing and brand sites",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(role_app, name="role")
app.add_typer(token_app, name="token")
app.add_typer(secret_app, name="secret")


@app.callback()
def callback() -> None:
    """OneSearch: federated search credentials for governing and brand sites."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
