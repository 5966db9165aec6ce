"""Domain layer: catalog errors."""

from catalog_api.domain.exceptions import (
    CatalogError,
    CategoryNotEmptyError,
    CategoryNotFoundError,
    DuplicateSkuError,
    InvalidCategoryParentError,
    ObjectStorageError,
    ProductNotFoundError,
)

__all__ = [
    "CatalogError",
    "CategoryNotEmptyError",
    "CategoryNotFoundError",
    "DuplicateSkuError",
    "InvalidCategoryParentError",
    "ObjectStorageError",
    "ProductNotFoundError",
]
