"""Async database handle.

A ``Database`` owns one engine (and therefore one connection pool). The app
factory constructs it, stores it on ``app.state`` and the lifespan disposes it
on shutdown. Nothing in the package keeps a module-level engine, so tests can
build their own handle against SQLite.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authstudy.core.config import Settings
from authstudy.core.logging import get_logger
from authstudy.models.base import Base

logger = get_logger(__name__)


class Database:
    """Engine + session factory with an explicit open/close lifecycle."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        pool_timeout: float = 2.0,
        echo: bool = False,
    ) -> None:
        self.url = make_url(url)
        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        # SQLite pools are single-file / static; sizing options don't apply
        if self.dialect != "sqlite":
            engine_kwargs.update(pool_size=pool_size, pool_timeout=pool_timeout)
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout,
            echo=settings.db_echo,
        )

    @property
    def dialect(self) -> str:
        return self.url.get_backend_name()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; commit on success, roll back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True when a trivial query round-trips."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Database unreachable", error=str(exc))
            return False
        return True

    async def create_all(self) -> None:
        """Create tables from ORM metadata (local dev / tests; prod uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    def __repr__(self) -> str:
        return f"<Database {self.url.render_as_string(hide_password=True)!r}>"
