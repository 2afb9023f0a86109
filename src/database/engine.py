"""
Database engine for Saratov Quest API

One process-wide AsyncEngine, built lazily from DATABASE_URL.
SQLite (aiosqlite) for local runs and tests, PostgreSQL (asyncpg) in production.
"""

from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from config.config import DATABASE_URL, ENVIRONMENT
from src.database.models import Base


_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

    # Built-in lower() folds ASCII only; ilike compiles to lower(x) LIKE lower(y)
    dbapi_connection.create_function("lower", 1, _unicode_lower)


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """
    Build an AsyncEngine for the given URL

    SQLite gets foreign keys and Unicode-aware lower(); other backends get a pool sized
    by environment.
    """
    if database_url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
        event.listen(sqlite_engine.sync_engine, "connect", _configure_sqlite_connection)
        return sqlite_engine

    production = ENVIRONMENT == "production"

    return create_async_engine(
        database_url,
        pool_size=10 if production else 5,
        max_overflow=20 if production else 10,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
        connect_args={"server_settings": {"application_name": "saratov_quest"}},
    )


def get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        _engine = create_engine_for_url(DATABASE_URL)
        logger.info(f"Database engine ready ({_engine.dialect.name}, {ENVIRONMENT})")

    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    global _session_maker

    if _session_maker is None:
        # Services keep using ORM objects after commit
        _session_maker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request

    Services commit their own work; anything left open when the handler
    raises is rolled back here.
    """
    async with get_session_maker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables (local runs; deployments use alembic)"""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema ensured")


async def dispose_engine() -> None:
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
        _engine = None
        _session_maker = None
