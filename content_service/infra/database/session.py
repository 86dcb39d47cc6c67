"""Database engine and session management.

The engine is created on first use from ``PostgresSettings``. When the
database integration is disabled, a local SQLite file is used instead.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from content_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./content.db"


def database_url() -> str:
    """URL the engine connects to."""
    db_settings = get_db_settings()
    return db_settings.url if db_settings.is_configured else SQLITE_FALLBACK_URL


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Create (once) the async engine for the configured database."""
    db_settings = get_db_settings()
    url = database_url()
    kwargs = db_settings.sqlalchemy_engine_kwargs() if db_settings.is_configured else {}
    kwargs["echo"] = db_settings.echo or get_app_settings().debug

    engine = create_async_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        configure_sqlite_engine(engine)
    return engine


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """Make SQLite behave for savepoints and foreign keys.

    The driver's own transaction handling ignores SAVEPOINT, so BEGIN is
    emitted explicitly; tree mutations run inside ``begin_nested()``.
    ON DELETE CASCADE on association tables and tree parents needs the
    foreign_keys pragma.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):  # noqa: ARG001
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Commits when the block exits cleanly, rolls back otherwise.

    Example:
        async with get_async_session() as session:
            await CategoryService(session).create_category(payload)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database() -> None:
    """Check database connectivity, retrying during startup.

    Uses retry settings from PostgresSettings:
    - startup_retry_attempts: Maximum number of connection attempts
    - startup_retry_delay: Delay between attempts (doubled each time)

    Raises:
        OperationalError: If the database is still unreachable after the
            last attempt.
    """
    db_settings = get_db_settings()
    attempts = db_settings.startup_retry_attempts
    delay = db_settings.startup_retry_delay
    url = get_engine().url.render_as_string(hide_password=True)

    logger.info(
        "Initializing database connection",
        extra={"url": url, "max_attempts": attempts},
    )
    for attempt in range(1, attempts + 1):
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (OperationalError, DBAPIError, OSError) as exc:
            if attempt == attempts:
                logger.error(
                    "Failed to connect to database",
                    extra={"url": url, "attempt": attempt, "error": str(exc)},
                )
                raise
            logger.warning(
                "Database not ready, retrying",
                extra={"url": url, "attempt": attempt, "retry_in": delay},
            )
            await asyncio.sleep(delay)
            delay *= 2
        else:
            logger.info("Database connection established successfully", extra={"url": url})
            return


async def close_database() -> None:
    """Dispose the engine and forget the cached factories.

    This should be called during application shutdown.
    """
    if get_engine.cache_info().currsize == 0:
        return
    logger.info("Closing database connection")
    await get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


__all__ = [
    "SQLITE_FALLBACK_URL",
    "close_database",
    "database_url",
    "configure_sqlite_engine",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_database",
]
