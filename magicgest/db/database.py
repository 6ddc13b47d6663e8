"""
Database engine and session management.

A Database owns one async SQLAlchemy engine and its session factory. The
application opens one at startup, keeps it on app.state, and disposes it on
shutdown; request handlers reach it through the get_session dependency.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from magicgest.models.db import Base


def _configure_sqlite_connection(dbapi_connection: Any, _connection_record: Any) -> None:
    # Leave BEGIN to SQLAlchemy so SAVEPOINTs nest inside a real transaction
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(connection: Any) -> None:
    connection.exec_driver_sql("BEGIN")


class Database:
    """Storage client: engine plus session factory."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        engine_args: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if ":memory:" in url:
            # In-memory SQLite lives as long as its one connection
            engine_args["poolclass"] = StaticPool
        self.engine: AsyncEngine = create_async_engine(url, **engine_args)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _configure_sqlite_connection)
            event.listen(self.engine.sync_engine, "begin", _begin_sqlite_transaction)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Transactional session scope.

        Commits when the block exits normally and rolls back on any
        exception, so everything done in one block lands atomically.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """
        Initialize database tables.

        Creates all tables defined in the ORM models.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """
        Drop all database tables.

        WARNING: Destroys all data. Use only for testing.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
