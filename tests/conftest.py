"""Shared fixtures for catalog tests."""

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_api.catalog.models import CategoryModel, ProductModel
from catalog_api.catalog.tree import Category, CategoryTree
from catalog_api.infrastructure.database import build_engine, create_tables
from tests.factories import CDN, FakeObjectStorage, make_categories


# ============================================================================
# Category Fixtures
# ============================================================================


@pytest.fixture
def categories() -> list[Category]:
    return make_categories()


@pytest.fixture
def tree(categories: list[Category]) -> CategoryTree:
    return CategoryTree(categories)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite session with the catalog tables."""
    engine = build_engine("sqlite+aiosqlite://")
    await create_tables(engine)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """Session holding the sporting goods forest and a few products."""
    session.add_all(
        [
            CategoryModel(id=c.id, name=c.name, parent_id=c.parent_id, sort_order=c.sort_order)
            for c in make_categories()
        ]
    )
    session.add_all(
        [
            ProductModel(id=1, name="Pro Basketball", sku="BB-1", price=Decimal("30"),
                         category_id=4, image_urls=f'[{{"url": "{CDN}/bb1.jpg", "size": 90}}]'),
            ProductModel(id=2, name="Street Basketball", sku="BB-2", price=Decimal("15"),
                         category_id=4, image_urls="[]"),
            ProductModel(id=3, name="Match Football", sku="FB-1", ean13="4710000000017",
                         price=None, category_id=5, image_urls="[]"),
            ProductModel(id=4, name="Ball Pump", sku="BP-1", price=Decimal("5"),
                         category_id=2, image_urls="not json"),
            ProductModel(id=5, name="Badminton Racket", sku="RK-1", price=Decimal("25"),
                         category_id=3, image_urls="[]"),
            ProductModel(id=6, name="Dome Tent", sku="TN-1", price=Decimal("0"),
                         category_id=7, image_urls="[]"),
        ]
    )
    await session.commit()
    return session


# ============================================================================
# Object Storage Fixtures
# ============================================================================


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage()
