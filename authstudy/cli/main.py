"""Auth0 Study CLI entry point — `authstudy` command group."""

from __future__ import annotations

import click

from authstudy.cli.commands.db import db_cmd
from authstudy.cli.commands.users import users_cmd
from authstudy.core.config import get_settings
from authstudy.core.logging import configure_logging


@click.group()
@click.version_option(package_name="authstudy")
def cli() -> None:
    """Auth0 Study API, a protected API with just-in-time user provisioning.

    \b
    Quick start:
      authstudy db init
      authstudy serve --reload
      authstudy users list

    API docs: http://localhost:5001/docs
    """
    configure_logging(get_settings())


cli.add_command(db_cmd)
cli.add_command(users_cmd)


@cli.command("serve")
@click.option("--host", default=None, help="Bind host [default: APP_HOST]")
@click.option("--port", default=None, type=int, help="Bind port [default: APP_PORT]")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload (dev mode)")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    from authstudy.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "authstudy.api.app:app",
        host=host or settings.app_host,
        port=port or settings.app_port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    cli()
