"""Tests for the `authstudy` CLI."""

import asyncio

from click.testing import CliRunner

from authstudy.cli.main import cli
from authstudy.core.auth import TokenClaims
from authstudy.core.database import Database
from authstudy.services.user_sync import reconcile_user


def test_db_init_creates_schema(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    result = CliRunner().invoke(cli, ["db", "init", "--database-url", url])

    assert result.exit_code == 0, result.output
    assert "external_subject_id" in result.output
    assert "Database initialised" in result.output


def test_db_check_unreachable(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'cli.db'}"
    result = CliRunner().invoke(cli, ["db", "check", "--database-url", url])
    assert result.exit_code == 1
    assert "unreachable" in result.output


def test_users_list(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    runner = CliRunner()
    assert runner.invoke(cli, ["db", "init", "--database-url", url]).exit_code == 0

    async def seed() -> None:
        db = Database(url)
        try:
            await reconcile_user(db, TokenClaims(sub="github:42"))
            await reconcile_user(db, TokenClaims(sub="google-oauth2|7"))
        finally:
            await db.dispose()

    asyncio.run(seed())

    result = runner.invoke(cli, ["users", "list", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "Showing 2 users" in result.output

    filtered = runner.invoke(
        cli, ["users", "list", "--provider", "github", "--database-url", url]
    )
    assert "Showing 1 users" in filtered.output
