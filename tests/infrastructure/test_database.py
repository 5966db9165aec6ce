"""Tests for engine construction and request sessions."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_api.catalog.models import CategoryModel
from catalog_api.infrastructure import database
from catalog_api.infrastructure.database import build_engine, create_tables, get_session


@pytest.fixture
async def factory(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[async_sessionmaker, None]:
    """Point request sessions at an in-memory database."""
    engine = build_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "async_session_factory", session_factory)
    yield session_factory
    await engine.dispose()


async def count_categories(factory: async_sessionmaker) -> int:
    async with factory() as session:
        return (await session.execute(select(func.count(CategoryModel.id)))).scalar_one()


class TestBuildEngine:
    """Tests for build_engine."""

    def test_memory_sqlite_shares_one_connection(self) -> None:
        engine = build_engine("sqlite+aiosqlite://")
        assert isinstance(engine.pool, StaticPool)

    def test_postgres_pings_pooled_connections(self) -> None:
        engine = build_engine("postgresql+asyncpg://catalog:pw@db:5432/catalog")
        assert engine.pool._pre_ping
        assert not isinstance(engine.pool, StaticPool)


class TestGetSession:
    """Tests for the request session dependency."""

    @pytest.mark.asyncio
    async def test_pending_writes_are_not_committed(self, factory: async_sessionmaker) -> None:
        """Only the service commits; a finished request leaves no trace."""
        sessions = get_session()
        session = await anext(sessions)
        session.add(CategoryModel(id=1, name="Sporting Goods", sort_order=0))
        await session.flush()

        with pytest.raises(StopAsyncIteration):
            await anext(sessions)

        assert await count_categories(factory) == 0

    @pytest.mark.asyncio
    async def test_committed_writes_survive(self, factory: async_sessionmaker) -> None:
        sessions = get_session()
        session = await anext(sessions)
        session.add(CategoryModel(id=1, name="Sporting Goods", sort_order=0))
        await session.commit()

        with pytest.raises(StopAsyncIteration):
            await anext(sessions)

        assert await count_categories(factory) == 1

    @pytest.mark.asyncio
    async def test_failed_request_rolls_back_and_reraises(self, factory: async_sessionmaker) -> None:
        sessions = get_session()
        session = await anext(sessions)
        session.add(CategoryModel(id=1, name="Sporting Goods", sort_order=0))
        await session.flush()

        with pytest.raises(RuntimeError, match="handler failed"):
            await sessions.athrow(RuntimeError("handler failed"))

        assert not session.in_transaction()
        assert await count_categories(factory) == 0
