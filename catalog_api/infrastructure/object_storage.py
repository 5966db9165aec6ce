"""HTTP client for the product image bucket.

Images are written with PUT and removed with DELETE against
``{object_storage_url}/{key}``. Public URLs are served from a separate
base URL, so the storage key of a stored image is recovered by stripping
that base from the public URL.
"""

from urllib.parse import quote

import httpx
import structlog

from catalog_api.domain.exceptions import ObjectStorageError
from catalog_api.infrastructure.config import settings

logger = structlog.get_logger()


class ObjectStorage:
    """Async client for the image bucket.

    Example usage:
        storage = ObjectStorage()
        url = await storage.put("ball.jpg", data, "image/jpeg")
        await storage.delete("ball.jpg")
    """

    def __init__(
        self,
        base_url: str | None = None,
        public_base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize storage client.

        Args:
            base_url: Bucket endpoint used for writes and deletes.
            public_base_url: Base of the publicly served image URLs.
            token: Optional bearer token for the bucket endpoint.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests).
        """
        self.base_url = (base_url or settings.object_storage_url).rstrip("/")
        self.public_base_url = (public_base_url or settings.image_public_base_url).rstrip("/")
        self.token = token if token is not None else settings.object_storage_token
        self.timeout = timeout or settings.object_storage_timeout
        self._transport = transport

    def public_url(self, key: str) -> str:
        """Get the public URL for a stored object."""
        return f"{self.public_base_url}/{key}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def put(self, key: str, body: bytes, content_type: str | None = None) -> str:
        """Store an object.

        Args:
            key: Object key.
            body: Object content.
            content_type: MIME type stored with the object.

        Returns:
            Public URL of the stored object.

        Raises:
            ObjectStorageError: If the bucket rejects the write.
        """
        url = f"{self.base_url}/{quote(key)}"
        try:
            async with self._client() as client:
                response = await client.put(url, content=body, headers=self._headers(content_type))
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ObjectStorageError(
                key, f"Upload failed with status {e.response.status_code}", e.response.status_code
            ) from e
        except httpx.RequestError as e:
            raise ObjectStorageError(key, f"Upload failed: {e}") from e

        logger.info("Stored object", key=key, size=len(body), content_type=content_type)
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        """Delete an object.

        A missing object is not an error.

        Raises:
            ObjectStorageError: If the bucket rejects the delete.
        """
        url = f"{self.base_url}/{quote(key)}"
        try:
            async with self._client() as client:
                response = await client.delete(url, headers=self._headers())
                if response.status_code != 404:
                    response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ObjectStorageError(
                key, f"Delete failed with status {e.response.status_code}", e.response.status_code
            ) from e
        except httpx.RequestError as e:
            raise ObjectStorageError(key, f"Delete failed: {e}") from e

        logger.info("Deleted object", key=key)


# Global storage instance
_object_storage: ObjectStorage | None = None


def get_object_storage() -> ObjectStorage:
    """Get the object storage singleton.

    Returns:
        ObjectStorage instance.
    """
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage()
    return _object_storage
