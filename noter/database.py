"""
Noter Backend: Database Handle, Transactions and Migrations
=============================================================

What:  Async SQLAlchemy engine wrapper, transaction helper, migration runner
       and the FastAPI dependency that hands the handle to routes.
How:   A single Database object owns the pooled engine and a session
       factory. It is created by the Server at startup, stored on
       app.state, injected into repositories with Depends(), and disposed
       once at shutdown.
Who:   Server (connect/close/migrate), repositories (sessions, transactions),
       /db/health (ping).

Connection Pooling:
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour
    The pool is safe for concurrent use; requests borrow a connection per
    operation and never hold one across requests.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar, Union

from alembic import command
from alembic.config import Config as AlembicConfig
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from noter.config import Settings
from noter.exceptions import DatabaseError, ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Alembic script directory shipped inside the package
MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic's env.py uses as its target.
    """
    pass


class Database:
    """
    Owned handle around the async engine (connection pool).

    Lifecycle:
        1. Database.connect(settings): build engine, ping with a bound
        2. Shared by every repository for the life of the process
        3. close(): dispose the pool exactly once (later calls are no-ops)
    """

    def __init__(self, engine: AsyncEngine):
        self._engine: Optional[AsyncEngine] = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    async def connect(cls, settings: Settings) -> "Database":
        """
        Create the pooled engine and verify it with a bounded ping.

        Raises:
            DatabaseError(kind=CONNECTION): The engine could not be created or
            the ping failed within settings.db_connect_timeout.
        """
        try:
            engine = create_async_engine(
                settings.database_url,
                pool_pre_ping=True,
                pool_recycle=3600,
                echo=settings.log_level == "DEBUG",
            )
        except Exception as e:
            raise DatabaseError(
                message="failed to connect to database",
                kind=ErrorKind.CONNECTION,
                operation="connect",
                cause=e,
            ) from e

        database = cls(engine)
        try:
            await database.ping(timeout=settings.db_connect_timeout)
        except DatabaseError:
            await database.close()
            raise

        logger.info(
            "Connected to database %s at %s:%d",
            settings.db_name,
            settings.db_host,
            settings.db_port,
        )
        return database

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseError(
                message="database handle is closed",
                kind=ErrorKind.CONNECTION,
            )
        return self._engine

    @property
    def is_closed(self) -> bool:
        return self._engine is None

    async def ping(self, timeout: Optional[float] = None) -> None:
        """
        Run SELECT 1 on a pooled connection, bounded by `timeout` seconds.

        Raises:
            DatabaseError(kind=CONNECTION) on failure or timeout.
        """
        engine = self.engine

        async def _select_one() -> None:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        try:
            await asyncio.wait_for(_select_one(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise DatabaseError(
                message=f"ping timed out after {timeout}s",
                kind=ErrorKind.CONNECTION,
                operation="ping",
                cause=e,
            ) from e
        except Exception as e:
            raise DatabaseError(
                message="failed to ping database",
                kind=ErrorKind.CONNECTION,
                operation="ping",
                cause=e,
            ) from e

    def session(self) -> AsyncSession:
        """
        New session for read-only work.

        Usage:
            async with database.session() as session:
                result = await session.execute(select(Note))
        """
        return self._session_factory()

    async def with_transaction(
        self, fn: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        """
        Run `fn(session)` inside one transaction.

        Exactly one of commit or rollback happens per call:
            fn raises          → rollback, original exception re-raised
            rollback fails too → DatabaseError(kind=TRANSACTION) carrying both
            fn succeeds        → commit, fn's result returned
            commit fails       → DatabaseError(kind=TRANSACTION)
        """
        async with self._session_factory() as session:
            try:
                await session.begin()
            except Exception as e:
                raise DatabaseError(
                    message="error starting transaction",
                    kind=ErrorKind.TRANSACTION,
                    operation="begin",
                    cause=e,
                ) from e

            try:
                result = await fn(session)
            except Exception as original:
                try:
                    await session.rollback()
                except Exception as rb_error:
                    raise DatabaseError(
                        message="error rolling back transaction",
                        kind=ErrorKind.TRANSACTION,
                        operation="rollback",
                        cause=original,
                        rollback_error=rb_error,
                    ) from original
                raise

            try:
                await session.commit()
            except Exception as e:
                raise DatabaseError(
                    message="error committing transaction",
                    kind=ErrorKind.TRANSACTION,
                    operation="commit",
                    cause=e,
                ) from e

            return result

    async def close(self) -> None:
        """Dispose the engine, closing all pooled connections."""
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        await engine.dispose()
        logger.info("Database connections closed")


# ── Dependency ────────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the handle bound to the application.

    The Server stores the handle on app.state.database when it binds the
    database routes; tests do the same with an SQLite-backed handle.
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise DatabaseError(
            message="database is not initialized",
            kind=ErrorKind.CONNECTION,
        )
    return database


# ── Migrations ────────────────────────────────────────────────────────────
def _alembic_config(url: Union[str, URL]) -> AlembicConfig:
    if isinstance(url, URL):
        url = url.render_as_string(hide_password=False)
    cfg = AlembicConfig()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # configparser interpolation: a literal % must be doubled
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


def run_migrations(target: Union[Settings, URL, str], revision: str = "head") -> None:
    """
    Apply every pending migration up to `revision`.

    A database that is already at `revision` is left untouched and this
    returns normally. Alembic's env.py drives an async engine through
    asyncio.run(), so call this from a thread with no running event loop
    (the Server uses asyncio.to_thread).

    Raises:
        DatabaseError(kind=MIGRATION): Any failure while migrating.
    """
    url = target.database_url if isinstance(target, Settings) else target
    try:
        command.upgrade(_alembic_config(url), revision)
    except Exception as e:
        raise DatabaseError(
            message="failed to run migrations",
            kind=ErrorKind.MIGRATION,
            operation="migrate",
            cause=e,
        ) from e
    logger.info("Database schema is at revision %s", revision)

