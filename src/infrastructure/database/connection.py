# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Platform database access.

Every institution lives in one shared PostgreSQL database and tenant
isolation is row-level, so a single pool serves all requests. The pool
is owned by a PlatformDatabase created at startup; request code only
asks for sessions.

Storage failures leave this module as DatabaseError. The error knows
whether the database was unreachable (503) or rejected the statement
(500); the API turns it into a JSON response without leaking SQL.

Example:
    await init_database(settings)

    async with get_session() as session:
        await LevelEnrollmentService(session).enroll_student_in_level(...)

    await close_database()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Errors meaning the database could not be reached at all
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)

_database: Optional["PlatformDatabase"] = None


class DatabaseError(Exception):
    """Storage failure surfaced to callers.

    Attributes:
        message: Client-safe description. Never contains SQL.
        original_error: The SQLAlchemy error behind it, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    @property
    def is_unavailable(self) -> bool:
        """Whether the database was unreachable rather than failing a statement."""
        return self.original_error is None or isinstance(
            self.original_error, _UNAVAILABLE_ERRORS
        )

    @property
    def status_code(self) -> int:
        """HTTP status the API responds with."""
        return 503 if self.is_unavailable else 500

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class PlatformDatabase:
    """Connection pool of the shared platform database.

    Example:
        database = PlatformDatabase(settings)
        await database.connect()

        async with database.session() as session:
            ...

        await database.close()
    """

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> None:
        """Create the pool. No connection is opened until first use.

        Raises:
            DatabaseError: If the engine cannot be created.
        """
        config = self._settings.database
        try:
            self._engine = create_async_engine(
                config.url,
                pool_size=config.pool_size,
                max_overflow=config.max_overflow,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to create database pool", e) from e

        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

    async def close(self) -> None:
        """Dispose of the pool."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    @property
    def engine(self) -> AsyncEngine:
        """The async engine.

        Raises:
            DatabaseError: If the pool is not connected.
        """
        if self._engine is None:
            raise DatabaseError("Database not initialized")
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session for one unit of work.

        Services commit their own transactions. Anything left
        uncommitted when the block exits is discarded, and storage
        errors are rolled back and raised as DatabaseError.

        Raises:
            DatabaseError: If not connected or a statement fails.
        """
        if self._sessionmaker is None:
            raise DatabaseError("Database not initialized")

        async with self._sessionmaker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError("Database operation failed", e) from e

    async def ping(self) -> bool:
        """Check if the database answers a trivial query."""
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False


# ========== Module-level functions ==========


async def init_database(settings: "Settings") -> None:
    """Create the global platform database pool at startup.

    Raises:
        DatabaseError: If the pool cannot be created.
    """
    global _database

    database = PlatformDatabase(settings)
    await database.connect()
    _database = database


async def close_database() -> None:
    """Dispose of the global pool at shutdown."""
    global _database

    if _database is not None:
        await _database.close()
        _database = None


def get_database() -> PlatformDatabase:
    """Get the global platform database.

    Raises:
        DatabaseError: If init_database has not run.
    """
    if _database is None:
        raise DatabaseError("Database not initialized")
    return _database


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Open a session on the global platform database.

    Raises:
        DatabaseError: If not initialized or a statement fails.
    """
    async with get_database().session() as session:
        yield session


async def check_database_connection() -> bool:
    """Check if the global platform database is reachable."""
    if _database is None:
        return False
    return await _database.ping()
