"""Domain exceptions.

Errors raised by the catalog service when a business rule is violated
or a referenced record does not exist.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Category Errors
# ============================================================================


class CategoryNotFoundError(CatalogError):
    """Raised when a category does not exist."""

    def __init__(self, category_id: int) -> None:
        super().__init__(
            f"Category {category_id} not found",
            details={"category_id": category_id},
        )


class CategoryNotEmptyError(CatalogError):
    """Raised when deleting a category that still has children or products."""

    def __init__(self, category_id: int, child_count: int, product_count: int) -> None:
        """Initialize category not empty error.

        Args:
            category_id: ID of the category.
            child_count: Number of direct sub-categories.
            product_count: Number of products assigned to the category.
        """
        if child_count:
            reason = f"it has {child_count} sub-categories"
        else:
            reason = f"{product_count} products still use it"
        super().__init__(
            f"Cannot delete category {category_id}: {reason}",
            details={
                "category_id": category_id,
                "child_count": child_count,
                "product_count": product_count,
            },
        )


class InvalidCategoryParentError(CatalogError):
    """Raised when a category would become its own ancestor."""

    def __init__(self, category_id: int, parent_id: int) -> None:
        super().__init__(
            f"Category {parent_id} cannot be the parent of category {category_id}",
            details={"category_id": category_id, "parent_id": parent_id},
        )


# ============================================================================
# Product Errors
# ============================================================================


class ProductNotFoundError(CatalogError):
    """Raised when a product does not exist."""

    def __init__(self, product_id: int) -> None:
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )


class DuplicateSkuError(CatalogError):
    """Raised when a write would give two products the same SKU."""

    def __init__(self, skus: list[str]) -> None:
        super().__init__(
            f"SKU already in use: {', '.join(skus)}" if skus else "SKU already in use",
            details={"skus": skus},
        )


# ============================================================================
# Storage Errors
# ============================================================================


class ObjectStorageError(CatalogError):
    """Raised when the image bucket rejects a request."""

    def __init__(self, key: str, message: str, status_code: int | None = None) -> None:
        super().__init__(
            message,
            details={"key": key, "status_code": status_code},
        )
        self.key = key
        self.status_code = status_code
