# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

The command line tools open one engine per process run and release it on
every exit path through open_database().

Uses SQLAlchemy 2.0 async API (asyncpg for PostgreSQL, aiosqlite for SQLite).

Example:
    from curriculum_sync.infrastructure.database.connection import (
        open_database,
        get_session,
    )

    async with open_database(settings):
        async with get_session() as session:
            result = await session.execute(select(Course))
            courses = result.scalars().all()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from curriculum_sync.core.config.settings import Settings

# Module-level state for the process-wide database connection
_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """Base exception for database operations.

    Raised for any failure of the persistent store (lookup, create, update
    or aggregate read). Never retried.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with options suited to the URL's backend.

    Args:
        url: Async SQLAlchemy database URL.
        echo: Echo SQL statements.

    Returns:
        A new AsyncEngine.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=1800,
        echo=echo,
    )


async def init_database(settings: "Settings") -> None:
    """Initialize the database engine and sessionmaker.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        DatabaseError: If engine creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = create_engine_for(settings.database.async_url, echo=settings.database.echo)
        _sessionmaker = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseError("Failed to initialize database connection", e) from e


async def close_database() -> None:
    """Dispose of the engine and all pooled connections."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


@asynccontextmanager
async def open_database(settings: "Settings") -> AsyncIterator[AsyncEngine]:
    """Acquire the database for the duration of a run.

    The engine is disposed on success, on validation failure and on any
    exception raised inside the block.

    Args:
        settings: Application settings.

    Yields:
        The initialized AsyncEngine.
    """
    await init_database(settings)
    try:
        yield get_engine()
    finally:
        await close_database()


def get_engine() -> AsyncEngine:
    """Get the async engine.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _engine is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Get an async session.

    The session is committed on success and rolled back on exception.
    Work already committed inside the block (the repository commits each
    write individually) is not undone by the rollback.

    Yields:
        AsyncSession for database operations.

    Raises:
        DatabaseError: If the database has not been initialized or
            if a database operation fails.
    """
    sessionmaker = get_sessionmaker()

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise

