"""Rich output helpers — tables for schema and user listings."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.table import Table

from authstudy.models.user import User

console = Console()


def fmt_date(value: datetime | None) -> str:
    if value is None:
        return "—"
    return value.strftime("%Y-%m-%d %H:%M")


def provider_style(provider: str) -> str:
    return {
        "google-oauth2": "blue",
        "github": "magenta",
        "auth0": "green",
        "unknown": "red",
    }.get(provider, "white")


def schema_table(columns: Iterable[dict[str, Any]]) -> Table:
    table = Table(title="users", show_lines=False)
    table.add_column("Column", style="cyan")
    table.add_column("Type")
    table.add_column("Nullable")
    for col in columns:
        table.add_row(
            col["name"],
            str(col["type"]),
            "NULL" if col.get("nullable", True) else "[bold]NOT NULL[/bold]",
        )
    return table


def users_table(users: Iterable[User]) -> Table:
    table = Table(title="Users")
    table.add_column("ID", justify="right")
    table.add_column("Subject", style="cyan")
    table.add_column("Provider")
    table.add_column("Email")
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Last login")
    for user in users:
        style = provider_style(user.provider)
        table.add_row(
            str(user.id),
            user.external_subject_id,
            f"[{style}]{user.provider}[/{style}]",
            user.email or "—",
            user.display_name or "—",
            fmt_date(user.created_at),
            fmt_date(user.last_login),
        )
    return table
