"""Mapping of catalog errors to HTTP responses."""

from fastapi import status

from catalog_api.domain.exceptions import (
    CatalogError,
    CategoryNotEmptyError,
    CategoryNotFoundError,
    DuplicateSkuError,
    InvalidCategoryParentError,
    ObjectStorageError,
    ProductNotFoundError,
)

ERROR_STATUS: dict[type[CatalogError], tuple[int, str]] = {
    CategoryNotFoundError: (status.HTTP_404_NOT_FOUND, "CATEGORY_NOT_FOUND"),
    ProductNotFoundError: (status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND"),
    CategoryNotEmptyError: (status.HTTP_409_CONFLICT, "CATEGORY_NOT_EMPTY"),
    DuplicateSkuError: (status.HTTP_409_CONFLICT, "DUPLICATE_SKU"),
    InvalidCategoryParentError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_CATEGORY_PARENT"),
    ObjectStorageError: (status.HTTP_502_BAD_GATEWAY, "OBJECT_STORAGE_ERROR"),
}


def error_status(exc: CatalogError) -> tuple[int, str]:
    """Get HTTP status and error code for a catalog error.

    Errors without a dedicated mapping are client errors.
    """
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_400_BAD_REQUEST, "BAD_REQUEST"
