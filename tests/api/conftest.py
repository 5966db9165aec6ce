"""Shared fixtures for API tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from catalog_api.api.deps import get_catalog_service
from catalog_api.catalog.service import CatalogService
from catalog_api.infrastructure.database import get_session
from catalog_api.main import app


class FakeSession:
    """Stands in for the database session in readiness checks."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    async def execute(self, statement: object) -> None:
        if self.fail:
            raise ConnectionRefusedError("connection refused")


@pytest.fixture
def service() -> AsyncMock:
    """Catalog service double; tests set return values per call."""
    return AsyncMock(spec=CatalogService)


@pytest.fixture
def client(service: AsyncMock) -> Iterator[TestClient]:
    """Create test client backed by the service double."""
    app.dependency_overrides[get_catalog_service] = lambda: service
    app.dependency_overrides[get_session] = lambda: FakeSession()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_db_client() -> Iterator[TestClient]:
    """Create test client whose database is unreachable."""
    app.dependency_overrides[get_session] = lambda: FakeSession(fail=True)
    yield TestClient(app)
    app.dependency_overrides.clear()
