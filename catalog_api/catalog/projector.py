"""Product row projection.

Stored product rows keep their image list as JSON text. This module
converts rows into typed ``Product`` objects and back, and works out
which stored images a product update leaves behind.

Image list format:
    [{"url": "https://images.example.com/ball-1.jpg", "size": 90}, ...]

The first image is the cover. Older rows store bare URL strings; they
load with the default size.
"""

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

from catalog_api.infrastructure.config import settings

logger = structlog.get_logger()

DEFAULT_IMAGE_SIZE = 100


@dataclass(frozen=True)
class ProductImage:
    """An image of a product.

    Attributes:
        url: Public image URL.
        size: Display size as a percentage (1-100).
    """

    url: str
    size: int = DEFAULT_IMAGE_SIZE

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "size": self.size}


@dataclass
class Product:
    """A catalog product, validated at the projection boundary.

    Attributes:
        id: Product ID.
        name: Product name.
        sku: Stock keeping unit (None when unset).
        ean13: EAN-13 barcode (None when unset).
        price: Price; None or non-positive means "price pending".
        description: Free text description.
        images: Ordered images, cover first.
        category_id: Owning category.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: int
    name: str
    sku: str | None = None
    ean13: str | None = None
    price: Decimal | None = None
    description: str = ""
    images: list[ProductImage] = field(default_factory=list)
    category_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_price(self) -> bool:
        """Whether the product has a usable (positive) price."""
        return self.price is not None and self.price > 0

    @property
    def cover_url(self) -> str | None:
        """URL of the first image, if any."""
        return self.images[0].url if self.images else None

    @property
    def image_urls(self) -> list[str]:
        return [image.url for image in self.images]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public API shape."""
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "ean13": self.ean13,
            "price": float(self.price) if self.price is not None else None,
            "description": self.description,
            "imageUrls": [image.to_dict() for image in self.images],
            "categoryId": self.category_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


def _clamp_size(value: Any, default: int) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        return default
    return min(max(size, 1), 100)


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class ProductRowProjector:
    """Maps stored product rows to ``Product`` objects and back.

    Example usage:
        projector = ProductRowProjector()
        product = projector.to_product(row)
        keys = projector.orphaned_keys(old.images, product.images)
    """

    def __init__(
        self,
        public_base_url: str | None = None,
        default_size: int = DEFAULT_IMAGE_SIZE,
    ) -> None:
        """Initialize projector.

        Args:
            public_base_url: Public URL prefix of images held in object
                storage; URLs without it are never treated as deletable.
            default_size: Size given to legacy images stored without one.
        """
        base = public_base_url if public_base_url is not None else settings.image_public_base_url
        self.public_base_url = base.rstrip("/")
        self.default_size = default_size

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def parse_images(self, value: Any) -> list[ProductImage]:
        """Normalize an already-decoded image list.

        Entries may be ``{"url", "size"}`` mappings or bare URL strings.
        Entries without a usable URL are skipped.
        """
        if not isinstance(value, list):
            return []
        images = []
        for entry in value:
            if isinstance(entry, str):
                url, size = entry, self.default_size
            elif isinstance(entry, dict):
                url = entry.get("url")
                size = _clamp_size(entry.get("size", self.default_size), self.default_size)
            else:
                continue
            if isinstance(url, str) and url.strip():
                images.append(ProductImage(url=url.strip(), size=size))
        return images

    def load_images(self, text: str | None, product_id: Any = None) -> list[ProductImage]:
        """Decode the stored image list.

        Never raises: unparseable text yields an empty list.

        Args:
            text: Stored JSON text.
            product_id: Product the text belongs to (for logging).

        Returns:
            Ordered images.
        """
        if not text:
            return []
        try:
            decoded = json.loads(text)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Unparseable image list",
                product_id=product_id,
                error=str(e),
            )
            return []
        if not isinstance(decoded, list):
            logger.warning(
                "Image list is not an array",
                product_id=product_id,
                value_type=type(decoded).__name__,
            )
            return []
        return self.parse_images(decoded)

    @staticmethod
    def dump_images(images: Iterable[ProductImage]) -> str:
        """Encode an image list to its stored JSON text."""
        return json.dumps([image.to_dict() for image in images], ensure_ascii=False)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_sku(value: Any) -> str | None:
        """Map empty or blank SKUs to None."""
        return _normalize_text(value)

    def to_product(self, row: Any) -> Product:
        """Project a stored row (ORM object or mapping) into a ``Product``."""
        get = row.get if isinstance(row, dict) else lambda name: getattr(row, name, None)
        product_id = get("id")
        return Product(
            id=product_id,
            name=get("name") or "",
            sku=_normalize_text(get("sku")),
            ean13=_normalize_text(get("ean13")),
            price=_to_decimal(get("price")),
            description=get("description") or "",
            images=self.load_images(get("image_urls"), product_id=product_id),
            category_id=get("category_id"),
            created_at=get("created_at"),
            updated_at=get("updated_at"),
        )

    def to_products(self, rows: Iterable[Any]) -> list[Product]:
        return [self.to_product(row) for row in rows]

    def to_row_values(self, product: Product) -> dict[str, Any]:
        """Get the stored column values of the mutable product fields."""
        return {
            "sku": self.normalize_sku(product.sku),
            "name": product.name,
            "ean13": _normalize_text(product.ean13),
            "price": product.price,
            "description": product.description or "",
            "image_urls": self.dump_images(product.images),
            "category_id": product.category_id,
        }

    # ------------------------------------------------------------------
    # Orphaned images
    # ------------------------------------------------------------------

    @staticmethod
    def orphaned_urls(
        old_images: Sequence[ProductImage],
        new_images: Sequence[ProductImage],
    ) -> list[str]:
        """Get URLs present in the old image list but not in the new one.

        Returns:
            Orphaned URLs in their old order, without duplicates.
        """
        keep = {image.url for image in new_images}
        return list(dict.fromkeys(image.url for image in old_images if image.url not in keep))

    def storage_key(self, url: str) -> str | None:
        """Recover the object storage key from a public image URL.

        Returns:
            The key, or None if the URL is not under the public prefix.
        """
        if not self.public_base_url:
            return None
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None

    def orphaned_keys(
        self,
        old_images: Sequence[ProductImage],
        new_images: Sequence[ProductImage],
    ) -> list[str]:
        """Get storage keys of images an update leaves unreferenced."""
        keys = (self.storage_key(url) for url in self.orphaned_urls(old_images, new_images))
        return [key for key in keys if key]
