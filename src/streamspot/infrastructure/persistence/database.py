"""Database engine and session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from streamspot.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and hands out sessions.

    One instance per process. The daily update opens one session per album
    task (``session_scope``), so the sessionmaker is the thing that's shared,
    never a session.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        url = settings.database.url

        engine_kwargs: dict[str, Any] = {
            "echo": settings.database.echo,
            "pool_pre_ping": settings.database.pool_pre_ping,
        }

        if url.startswith("postgresql"):
            engine_kwargs.update(
                {
                    "pool_size": settings.database.pool_size,
                    "max_overflow": settings.database.max_overflow,
                    "pool_timeout": settings.database.pool_timeout,
                    "pool_recycle": settings.database.pool_recycle,
                }
            )
        elif url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": 30,  # seconds to wait on a write lock
            }
            # Hey future me - an in-memory SQLite DB lives and dies with ONE connection.
            # Without StaticPool every session would see its own empty database (tests!).
            if ":memory:" in url or "mode=memory" in url:
                engine_kwargs["poolclass"] = StaticPool

        self._engine = create_async_engine(url, **engine_kwargs)

        if url.startswith("sqlite"):
            self._enable_sqlite_foreign_keys()

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    def _enable_sqlite_foreign_keys(self) -> None:
        """Turn on FK enforcement for every SQLite connection.

        SQLite ships with foreign keys off; the album -> track -> daily_streams
        cascade on artist deletion depends on them.
        """

        @event.listens_for(self._engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn: Any, _connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope: commit on success, rollback on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                # Broad on purpose, the exception is re-raised untouched.
                await session.rollback()
                raise

    async def close(self) -> None:
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create all tables (tests and first start without Alembic)."""
        from streamspot.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("Created tables for %s", self._engine.url.render_as_string())

