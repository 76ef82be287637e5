"""
Database Connection Module
Handles the SQL data backend using the SQLAlchemy async engine.

Only used when DATA_BACKEND=sql. SQLite (aiosqlite) is the default so a
self-hosted install runs without a database server; point DATABASE_URL
at postgresql+psycopg://... for Postgres.
"""

import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from scan2dine.core.config import get_settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite gets no pool sizing arguments; its dialect picks its own pool.
    """
    kwargs = {"echo": echo}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=5,  # Connection pool size
            max_overflow=10,  # Extra connections when pool is full
        )
    return create_async_engine(database_url, **kwargs)


@lru_cache()
def get_engine() -> AsyncEngine:
    """Process-wide engine built from settings."""
    settings = get_settings()
    return create_engine_for_url(settings.database_url, echo=settings.database_echo)


@lru_cache()
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory - creates new database sessions."""
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,  # Objects remain accessible after commit
    )


def _ensure_sqlite_directory(engine: AsyncEngine) -> None:
    url = make_url(str(engine.url))
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Registers the tables on Base.metadata
    from scan2dine import models  # noqa: F401

    engine = engine or get_engine()
    _ensure_sqlite_directory(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables created successfully!")


async def dispose_engine() -> None:
    """Close pooled connections at shutdown."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
