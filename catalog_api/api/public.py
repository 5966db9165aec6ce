"""Public storefront API endpoints.

Read-only access to categories and products for the storefront.
"""

from fastapi import APIRouter, Query

from catalog_api.api.deps import CatalogServiceDep
from catalog_api.api.schemas import (
    CategoryCoverResponse,
    CategoryListResponse,
    ErrorResponse,
    ProductListResponse,
    ProductSchema,
)
from catalog_api.catalog.listing import ListingRequest

router = APIRouter(prefix="/public", tags=["Storefront"])


@router.get(
    "/all-data",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(service: CatalogServiceDep) -> CategoryListResponse:
    """Get every category, ordered by parent and sort order."""
    categories = await service.get_categories()
    return CategoryListResponse.model_validate(
        {"categories": [c.to_dict() for c in categories]}
    )


@router.get(
    "/products",
    response_model=ProductListResponse,
    summary="List products",
    description=(
        "Paginated product listing. A category filter includes every "
        "sub-category; the search term matches name, SKU and EAN-13. "
        "Invalid parameters fall back to their defaults."
    ),
)
async def list_products(
    service: CatalogServiceDep,
    page: str | None = Query(default=None, description="Page number (default 1)"),
    limit: str | None = Query(default=None, description="Items per page (default 24)"),
    category_id: str | None = Query(default=None, alias="categoryId"),
    search: str | None = Query(default=None),
    sort_by: str | None = Query(
        default=None, alias="sortBy", description="price, name, createdAt or updatedAt"
    ),
    order: str | None = Query(default=None, description="asc or desc"),
) -> ProductListResponse:
    """List one page of products."""
    listing = ListingRequest.from_query(
        {
            "page": page,
            "limit": limit,
            "categoryId": category_id,
            "search": search,
            "sortBy": sort_by,
            "order": order,
        }
    )
    result = await service.list_products(listing, public=True)
    return ProductListResponse.model_validate(
        {
            "products": [p.to_dict() for p in result.products],
            "pagination": result.pagination.to_dict(),
        }
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(product_id: int, service: CatalogServiceDep) -> ProductSchema:
    """Get a product by ID."""
    product = await service.get_product(product_id)
    return ProductSchema.model_validate(product.to_dict())


@router.get(
    "/categories/{category_id}/cover",
    response_model=CategoryCoverResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category cover image",
)
async def get_category_cover(category_id: int, service: CatalogServiceDep) -> CategoryCoverResponse:
    """Get a representative image for a category page."""
    image_url = await service.category_cover_image(category_id)
    return CategoryCoverResponse(category_id=category_id, image_url=image_url)
