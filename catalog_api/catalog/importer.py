"""Legacy JSON export import.

Converts the ``categories.json`` / ``products.json`` pair of the old
static storefront into rows for the relational store. Ids are kept so
that existing links stay valid.

Legacy product shape:
    {"id": 17, "name": "...", "sku": "", "ean13": "", "price": 120,
     "description": "...", "imageUrls": ["https://..."], "imageSize": 90,
     "categoryId": 4}
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

from catalog_api.catalog.models import CategoryModel, ProductModel
from catalog_api.catalog.projector import ProductRowProjector

logger = structlog.get_logger()

# Card size the old storefront rendered when a product had no imageSize.
LEGACY_IMAGE_SIZE = 90


@dataclass
class ImportBatch:
    """Rows ready to insert."""

    categories: list[CategoryModel] = field(default_factory=list)
    products: list[ProductModel] = field(default_factory=list)
    skipped: int = 0


def _price(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def convert_categories(rows: Iterable[Mapping[str, Any]]) -> list[CategoryModel]:
    """Convert legacy categories.

    Legacy rows carry no sort order; siblings are numbered in file order.
    """
    next_order: dict[Any, int] = {}
    models = []
    for row in rows:
        parent_id = row.get("parentId")
        if "sortOrder" in row and row["sortOrder"] is not None:
            sort_order = int(row["sortOrder"])
        else:
            sort_order = next_order.get(parent_id, 0)
        next_order[parent_id] = max(next_order.get(parent_id, 0), sort_order + 1)
        models.append(
            CategoryModel(
                id=int(row["id"]),
                name=str(row.get("name") or "").strip(),
                parent_id=int(parent_id) if parent_id is not None else None,
                sort_order=sort_order,
            )
        )
    return models


def convert_products(
    rows: Iterable[Mapping[str, Any]],
    projector: ProductRowProjector | None = None,
) -> tuple[list[ProductModel], int]:
    """Convert legacy products.

    Products without a name or id are skipped. A missing SKU becomes
    ``SKU-{id}``; a product-level ``imageSize`` (default 90)
    applies to bare URLs.

    Returns:
        Converted rows and the number of skipped entries.
    """
    projector = projector or ProductRowProjector()
    models = []
    skipped = 0
    for row in rows:
        if row.get("id") is None or not row.get("name"):
            skipped += 1
            logger.warning("Skipping legacy product", product_id=row.get("id"))
            continue

        product_id = int(row["id"])
        default_size = row.get("imageSize") or LEGACY_IMAGE_SIZE
        images = ProductRowProjector(
            public_base_url=projector.public_base_url,
            default_size=int(default_size),
        ).parse_images(row.get("imageUrls") or [])

        models.append(
            ProductModel(
                id=product_id,
                sku=projector.normalize_sku(row.get("sku")) or f"SKU-{product_id}",
                name=str(row["name"]).strip(),
                ean13=projector.normalize_sku(row.get("ean13")),
                price=_price(row.get("price")),
                description=row.get("description") or "",
                image_urls=projector.dump_images(images),
                category_id=row.get("categoryId"),
            )
        )
    return models, skipped


def convert_export(
    categories: Iterable[Mapping[str, Any]],
    products: Iterable[Mapping[str, Any]],
) -> ImportBatch:
    """Convert a legacy export pair."""
    product_models, skipped = convert_products(products)
    return ImportBatch(
        categories=convert_categories(categories),
        products=product_models,
        skipped=skipped,
    )
