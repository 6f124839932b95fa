"""
SNS API Server — Database Handle and Session Management
========================================================

What:  Async SQLAlchemy engine, session factory, declarative base, and the
       FastAPI session dependency.
How:   A `Database` object owns one engine and one session factory. The app
       factory creates it once and stores it on `app.state.database`; the
       lifespan disposes it on shutdown. Each request borrows a session; the
       service commits its writes before the handler returns, and anything
       left uncommitted is rolled back when the session closes.
Who:   Used by route handlers via FastAPI's dependency injection system, by
       the health check, and by the test suite (which injects a SQLite handle).

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and apply to
    server databases only. SQLite gets SQLAlchemy's default pool and has
    foreign-key enforcement switched on per connection so that deleting a
    post cascades to its likes the same way PostgreSQL does.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model with a single metadata object, which Alembic and
    `Database.create_all()` both read.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-wide persistence handle.

    Lifecycle:
        1. Constructed once by `create_app()` (or injected by tests)
        2. Hands out one AsyncSession per request via `session()`
        3. `dispose()` closes every pooled connection at shutdown
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        is_sqlite = make_url(url).get_backend_name() == "sqlite"

        engine_kwargs = {"echo": echo, "pool_pre_ping": pool_pre_ping}
        if not is_sqlite:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,  # Recycle after 1 hour to drop stale connections
            )

        self.engine = create_async_engine(url, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: response models read attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit-of-work scope: commit on success, roll back on any error.

        For scripts and tests. Request handlers use `get_db_session`, whose
        teardown may run after the response is sent, so it never commits.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Runs SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every table registered on Base.metadata (tests and local dev)."""
        # Model modules must be imported so their tables are registered
        from sns_api.models import post  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Does not commit: PostService commits inside its own error handling, so
    a failed commit becomes a 500 before any success status is sent.

    Resolves the Database handle from `request.app.state.database`, so the
    handler set never reaches for a module-level engine.

    Example usage in a route:
        @router.get("/api/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
