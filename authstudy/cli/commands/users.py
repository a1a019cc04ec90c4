"""CLI commands for provisioned users."""

from __future__ import annotations

import asyncio

import click
from sqlalchemy import select

from authstudy.cli.output import console, users_table
from authstudy.core.config import get_settings
from authstudy.core.database import Database
from authstudy.models.user import User


@click.group("users")
def users_cmd() -> None:
    """Browse users provisioned on first login."""


async def _fetch_users(database: Database, limit: int, provider: str | None) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc()).limit(limit)
    if provider:
        stmt = stmt.where(User.provider == provider)
    try:
        async with database.session() as session:
            return list((await session.scalars(stmt)).all())
    finally:
        await database.dispose()


@users_cmd.command("list")
@click.option("--limit", default=50, show_default=True, help="Max rows to display")
@click.option("--provider", default=None, help="Only users from this provider (e.g. github)")
@click.option("--database-url", default=None, help="Override DATABASE_URL")
def users_list(limit: int, provider: str | None, database_url: str | None) -> None:
    """List provisioned users, newest first."""
    settings = get_settings()
    database = Database(database_url or settings.database_url)
    try:
        users = asyncio.run(_fetch_users(database, limit, provider))
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    console.print(users_table(users))
    console.print(f"[dim]Showing {len(users)} users.[/dim]")
