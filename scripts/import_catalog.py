#!/usr/bin/env python3
"""Import a legacy JSON catalog export.

Loads ``categories.json`` and ``products.json`` from the old static
storefront into the database, keeping their ids.

Usage:
    python scripts/import_catalog.py --dir ./export
    python scripts/import_catalog.py --dir ./export --clear
"""

import argparse
import asyncio
import json
from pathlib import Path

from sqlalchemy import delete

from catalog_api.catalog.importer import convert_export
from catalog_api.catalog.models import CategoryModel, ProductModel
from catalog_api.infrastructure.database import async_session_factory, create_tables
from catalog_api.infrastructure.logging import configure_logging


async def import_export(directory: Path, clear: bool) -> dict:
    """Import one export directory.

    Args:
        directory: Directory holding categories.json and products.json.
        clear: Whether to delete existing rows first.

    Returns:
        Import counts.
    """
    categories = json.loads((directory / "categories.json").read_text(encoding="utf-8"))
    products = json.loads((directory / "products.json").read_text(encoding="utf-8"))
    batch = convert_export(categories, products)

    async with async_session_factory() as session:
        if clear:
            await session.execute(delete(ProductModel))
            await session.execute(delete(CategoryModel))
        session.add_all(batch.categories)
        session.add_all(batch.products)
        await session.commit()

    return {
        "categories": len(batch.categories),
        "products": len(batch.products),
        "skipped": batch.skipped,
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import a legacy JSON catalog export",
    )
    parser.add_argument(
        "--dir",
        type=Path,
        default=Path("."),
        help="Directory with categories.json and products.json",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing categories and products before importing",
    )

    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Catalog Importer")
    print("=" * 60)

    print("Creating database tables...")
    await create_tables()

    result = await import_export(args.dir, clear=args.clear)
    print(f"  ✓ Categories: {result['categories']}")
    print(f"  ✓ Products: {result['products']}")
    if result["skipped"]:
        print(f"  ✗ Skipped: {result['skipped']} malformed products")

    print("=" * 60)
    print("Import complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
