"""Test data builders shared by the test modules."""

from datetime import datetime, timezone
from decimal import Decimal

from catalog_api.catalog.projector import Product, ProductImage
from catalog_api.catalog.tree import Category
from catalog_api.domain.exceptions import ObjectStorageError

CDN = "https://cdn.example.com"


def make_categories() -> list[Category]:
    """Sporting goods forest used across tests.

    1 Sporting Goods (0)
      2 Balls (0)
        4 Basketballs (0)
        5 Footballs (1)
      3 Rackets (1)
    6 Outdoor (1)
      7 Tents (0)
    """
    return [
        Category(id=1, name="Sporting Goods", parent_id=None, sort_order=0),
        Category(id=2, name="Balls", parent_id=1, sort_order=0),
        Category(id=3, name="Rackets", parent_id=1, sort_order=1),
        Category(id=4, name="Basketballs", parent_id=2, sort_order=0),
        Category(id=5, name="Footballs", parent_id=2, sort_order=1),
        Category(id=6, name="Outdoor", parent_id=None, sort_order=1),
        Category(id=7, name="Tents", parent_id=6, sort_order=0),
    ]


def make_product(
    product_id: int,
    category_id: int | None,
    price: str | None = "10",
    name: str | None = None,
    sku: str | None = None,
    ean13: str | None = None,
    images: list[ProductImage] | None = None,
    updated_day: int = 1,
) -> Product:
    """Create a product with predictable fields."""
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        sku=sku,
        ean13=ean13,
        price=Decimal(price) if price is not None else None,
        images=images or [],
        category_id=category_id,
        created_at=datetime(2025, 1, updated_day, tzinfo=timezone.utc),
        updated_at=datetime(2025, 1, updated_day, tzinfo=timezone.utc),
    )


class FakeObjectStorage:
    """Records puts and deletes; can be told to fail deletes."""

    def __init__(self, fail_deletes: bool = False) -> None:
        self.public_base_url = CDN
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_deletes = fail_deletes

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    async def put(self, key: str, body: bytes, content_type: str | None = None) -> str:
        self.objects[key] = body
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        if self.fail_deletes:
            raise ObjectStorageError(key, "Delete failed with status 500", 500)
        self.deleted.append(key)
        self.objects.pop(key, None)
