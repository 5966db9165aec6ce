"""Tests for the image bucket client."""

import httpx
import pytest

from catalog_api.domain.exceptions import ObjectStorageError
from catalog_api.infrastructure.object_storage import ObjectStorage


def make_storage(handler) -> ObjectStorage:
    return ObjectStorage(
        base_url="http://bucket.test/images/",
        public_base_url="https://cdn.example.com/",
        token="secret",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestPut:
    """Tests for ObjectStorage.put."""

    @pytest.mark.asyncio
    async def test_put_returns_public_url(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        url = await make_storage(handler).put("ball 1.jpg", b"jpeg", "image/jpeg")

        assert url == "https://cdn.example.com/ball 1.jpg"
        request = seen[0]
        assert request.method == "PUT"
        assert request.url.raw_path == b"/images/ball%201.jpg"
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["Content-Type"] == "image/jpeg"
        assert request.content == b"jpeg"

    @pytest.mark.asyncio
    async def test_put_rejected(self) -> None:
        storage = make_storage(lambda request: httpx.Response(403))

        with pytest.raises(ObjectStorageError) as exc_info:
            await storage.put("ball.jpg", b"jpeg")

        assert exc_info.value.status_code == 403
        assert exc_info.value.key == "ball.jpg"

    @pytest.mark.asyncio
    async def test_put_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ObjectStorageError) as exc_info:
            await make_storage(handler).put("ball.jpg", b"jpeg")

        assert exc_info.value.status_code is None


class TestDelete:
    """Tests for ObjectStorage.delete."""

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        await make_storage(handler).delete("ball.jpg")

        assert seen[0].method == "DELETE"
        assert seen[0].url.path == "/images/ball.jpg"

    @pytest.mark.asyncio
    async def test_missing_object_is_not_an_error(self) -> None:
        await make_storage(lambda request: httpx.Response(404)).delete("gone.jpg")

    @pytest.mark.asyncio
    async def test_delete_rejected(self) -> None:
        storage = make_storage(lambda request: httpx.Response(500))

        with pytest.raises(ObjectStorageError) as exc_info:
            await storage.delete("ball.jpg")

        assert exc_info.value.status_code == 500


def test_public_url() -> None:
    storage = ObjectStorage(base_url="http://bucket.test", public_base_url="https://cdn.example.com/")
    assert storage.public_url("a.jpg") == "https://cdn.example.com/a.jpg"
