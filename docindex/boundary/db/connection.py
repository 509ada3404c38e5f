"""
Database connection management.

Provides the async SQLAlchemy engine and session factory. On SQLite every
new DBAPI connection loads the sqlite-vec extension, which supplies the
vector distance functions used by similarity search.

Dependencies: sqlalchemy, aiosqlite, asyncpg, sqlite_vec, docindex.configs
System role: Database connection lifecycle management
"""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
import sqlite_vec

from docindex.configs.database import DatabaseSettings

logger = logging.getLogger(__name__)


def _load_sqlite_vec(dbapi_connection, connection_record) -> None:
    """Load the sqlite-vec extension into a fresh aiosqlite connection."""
    path = sqlite_vec.loadable_path()
    dbapi_connection.run_async(lambda conn: conn.enable_load_extension(True))
    try:
        dbapi_connection.run_async(lambda conn: conn.load_extension(path))
    finally:
        dbapi_connection.run_async(lambda conn: conn.enable_load_extension(False))


def build_async_engine(database_url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Args:
        database_url: SQLAlchemy async URL (sqlite+aiosqlite or postgresql+asyncpg)
        echo: Echo SQL statements to logs
        **engine_kwargs: Passed through to create_async_engine (poolclass, pool_size...)

    Returns:
        AsyncEngine: Engine ready for use by the vector store

    Usage:
        engine = build_async_engine("sqlite+aiosqlite:///:memory:")
    """
    engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _load_sqlite_vec)
    logger.info(f"{__name__}:build_async_engine - Created {engine.dialect.name} engine")
    return engine


def get_async_engine(settings: DatabaseSettings) -> AsyncEngine:
    """
    Create the async engine described by database settings.

    SQLite databases live under ``data_path``, which is created on demand.
    PostgreSQL engines use a bounded connection pool with pre-ping.

    Args:
        settings: Database settings

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine
    """
    if settings.backend == "sqlite":
        settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        return build_async_engine(settings.async_database_url, echo=settings.echo_sql)

    return build_async_engine(
        settings.async_database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Sessions use autoflush=False and expire_on_commit=False so that rows
    can be converted to records after their transaction commits.

    Args:
        engine: Async engine to bind

    Returns:
        async_sessionmaker: Async session factory
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
