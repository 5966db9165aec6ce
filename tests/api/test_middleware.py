"""Tests for request correlation and unhandled errors."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from catalog_api.api.middleware import RequestIdMiddleware
from catalog_api.domain.exceptions import ProductNotFoundError
from catalog_api.main import app


@pytest.fixture
def lenient_client(client: TestClient) -> Iterator[TestClient]:
    """Client that returns 500 responses instead of raising."""
    yield TestClient(app, raise_server_exceptions=False)


class TestRequestId:
    """Tests for X-Request-ID handling."""

    def test_supplied_id_is_echoed(self, client: TestClient, service: AsyncMock) -> None:
        service.get_categories.return_value = []
        response = client.get("/public/all-data", headers={"X-Request-ID": " order-42 "})
        assert response.headers["X-Request-ID"] == "order-42"

    def test_oversized_id_is_replaced(self, client: TestClient) -> None:
        supplied = "x" * (RequestIdMiddleware.MAX_LENGTH + 1)
        response = client.get("/health", headers={"X-Request-ID": supplied})
        assert response.headers["X-Request-ID"] != supplied
        assert len(response.headers["X-Request-ID"]) == 32

    def test_error_body_carries_request_id(self, client: TestClient, service: AsyncMock) -> None:
        service.get_product.side_effect = ProductNotFoundError(99)

        response = client.get("/api/products/99", headers={"X-Request-ID": "req-404"})

        assert response.status_code == 404
        assert response.json()["request_id"] == "req-404"
        assert response.headers["X-Request-ID"] == "req-404"


class TestUnhandledErrors:
    """Unexpected exceptions become one INTERNAL_ERROR body."""

    def test_internal_error_body(self, lenient_client: TestClient, service: AsyncMock) -> None:
        service.get_categories.side_effect = RuntimeError("database exploded")

        response = lenient_client.get("/api/all-data", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.json() == {
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": "req-500",
        }

    def test_internal_error_does_not_leak_message(
        self, lenient_client: TestClient, service: AsyncMock
    ) -> None:
        service.list_products.side_effect = RuntimeError("password=hunter2")

        response = lenient_client.get("/api/products")

        assert response.status_code == 500
        assert "hunter2" not in response.text
