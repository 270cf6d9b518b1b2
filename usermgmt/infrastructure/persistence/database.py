"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

The store handle is an explicitly constructed ``Database`` (engine plus
session factory). It is created once at process start (see
usermgmt.core.lifespan), passed to whoever needs sessions, and disposed at
shutdown. Tests build isolated instances against in-memory SQLite.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from usermgmt.core.config import Settings

logger = logging.getLogger(__name__)

_DEFAULT_POOL_SIZE = 20
_DEFAULT_MAX_OVERFLOW = 30


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    """SQLite ignores FOREIGN KEY clauses unless enabled per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory for one store URL.

    Use ``session()`` for reads (no commit) and ``transaction()`` for writes
    (commit on success, rollback on exception). Call ``dispose()`` once at
    shutdown; it is safe to call more than once.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int | None = None,
        max_overflow: int | None = None,
    ) -> None:
        parsed = make_url(url)
        self.backend = parsed.get_backend_name()
        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        connect_args: dict[str, Any] = {}
        if self.backend == "sqlite":
            if parsed.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty database.
                engine_kwargs["poolclass"] = StaticPool
                connect_args["check_same_thread"] = False
        else:
            engine_kwargs["pool_size"] = pool_size if pool_size is not None else _DEFAULT_POOL_SIZE
            engine_kwargs["max_overflow"] = (
                max_overflow if max_overflow is not None else _DEFAULT_MAX_OVERFLOW
            )
            engine_kwargs["pool_recycle"] = 3600
        self.engine: AsyncEngine = create_async_engine(
            url, connect_args=connect_args, **engine_kwargs
        )
        if self.backend == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._disposed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a Database from application settings (resolved URL, echo, pool)."""
        return cls(
            settings.resolved_database_url,
            echo=settings.database_echo,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session for read operations. Does not commit."""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction: commit on success, roll back on exception."""
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def create_all(self) -> None:
        """Create all tables (development and tests; production schema is managed externally)."""
        from usermgmt.infrastructure.persistence import models  # noqa: F401  (registers tables)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        from usermgmt.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close all pooled connections. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        await self.engine.dispose()
        logger.info("Database engine disposed")
