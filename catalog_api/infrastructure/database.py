"""Database engine and request sessions for the catalog tables.

Catalog writes commit inside ``CatalogService``: every write, a whole
product batch included, is one transaction that the service commits or
rolls back itself. Request sessions therefore never commit on their own,
and anything a request leaves pending is discarded.
"""

from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from catalog_api.infrastructure.config import settings

logger = structlog.get_logger()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for a database URL.

    An in-memory SQLite URL gets a single shared connection so that every
    session sees the same database.

    Args:
        database_url: SQLAlchemy URL (``postgresql+asyncpg://...``).
        echo: Log emitted SQL.

    Returns:
        Async engine.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for catalog models
Base = declarative_base()


async def create_tables(target: AsyncEngine | None = None) -> None:
    """Create the catalog tables if they don't exist."""
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a request-scoped session.

    Yields:
        AsyncSession for the request. Nothing is committed here.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            if session.in_transaction():
                logger.warning("Rolling back request session")
            await session.rollback()
            raise
