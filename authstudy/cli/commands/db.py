"""CLI commands for the users database."""

from __future__ import annotations

import asyncio

import click
from sqlalchemy import inspect

from authstudy.cli.output import console, schema_table
from authstudy.core.config import get_settings
from authstudy.core.database import Database


@click.group("db")
def db_cmd() -> None:
    """Create and check the database schema."""


async def _init(database: Database) -> list[dict]:
    try:
        await database.create_all()
        async with database.engine.connect() as conn:
            return await conn.run_sync(lambda c: inspect(c).get_columns("users"))
    finally:
        await database.dispose()


@db_cmd.command("init")
@click.option("--database-url", default=None, help="Override DATABASE_URL")
def db_init(database_url: str | None) -> None:
    """Create the users table and indexes, then print the resulting schema.

    Production deployments should prefer `alembic upgrade head`.
    """
    settings = get_settings()
    database = Database(database_url or settings.database_url)
    console.print(f"Creating schema on [cyan]{database.url.render_as_string(hide_password=True)}[/cyan]")
    try:
        columns = asyncio.run(_init(database))
    except Exception as e:
        console.print(f"[red]✗ Schema creation failed:[/red] {e}")
        raise SystemExit(1)

    console.print(schema_table(columns))
    console.print("[green]✓ Database initialised[/green]")


@db_cmd.command("check")
@click.option("--database-url", default=None, help="Override DATABASE_URL")
def db_check(database_url: str | None) -> None:
    """Test the database connection."""
    settings = get_settings()
    database = Database(database_url or settings.database_url)

    async def _ping() -> bool:
        try:
            return await database.ping()
        finally:
            await database.dispose()

    if asyncio.run(_ping()):
        console.print("[green]✓ Database reachable[/green]")
    else:
        console.print("[red]✗ Database unreachable[/red]")
        raise SystemExit(1)
