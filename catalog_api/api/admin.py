"""Admin API endpoints.

Back-office listing, product and category management, batch import,
image upload and print catalog layout.
"""

from fastapi import APIRouter, Query, Request, Response, status

from catalog_api.api.deps import CatalogServiceDep
from catalog_api.api.schemas import (
    BatchCreateRequest,
    BatchCreateResponse,
    CatalogListResponse,
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryOutlineResponse,
    CategorySchema,
    CategoryUpdateRequest,
    ErrorResponse,
    PrintLayoutResponse,
    ProductListResponse,
    ProductSchema,
    ProductWriteRequest,
    UploadResponse,
)
from catalog_api.catalog.listing import CatalogRequest, ListingRequest

router = APIRouter(prefix="/api", tags=["Admin"])


# ============================================================================
# Listing
# ============================================================================


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
    "/category-outline",
    response_model=CategoryOutlineResponse,
    summary="Category outline",
)
async def category_outline(service: CatalogServiceDep) -> CategoryOutlineResponse:
    """Get every category in depth-first catalog order with its depth.

    Categories with a dangling parent or caught in a parent cycle are
    listed as extra roots.
    """
    outline = await service.get_category_outline()
    return CategoryOutlineResponse.model_validate(
        {"categories": [{**c.to_dict(), "depth": depth} for c, depth in outline]}
    )


@router.get(
    "/products",
    response_model=ProductListResponse | CatalogListResponse,
    summary="List products",
    description=(
        "Without `categoryIds`: paginated listing, a category filter includes "
        "every sub-category and the search term matches name and SKU. "
        "With `categoryIds`: catalog mode, products of exactly the given "
        "categories in catalog order, capped at 500, not paginated."
    ),
)
async def list_products(
    service: CatalogServiceDep,
    category_ids: str | None = Query(
        default=None, alias="categoryIds", description="Comma-separated category IDs"
    ),
    page: str | None = Query(default=None, description="Page number (default 1)"),
    limit: str | None = Query(default=None, description="Items per page (default 24)"),
    category_id: str | None = Query(default=None, alias="categoryId"),
    search: str | None = Query(default=None),
    sort_by: str | None = Query(
        default=None, alias="sortBy", description="price, name, createdAt or updatedAt"
    ),
    order: str | None = Query(default=None, description="asc or desc"),
) -> ProductListResponse | CatalogListResponse:
    """List products in single or catalog mode."""
    if category_ids is not None:
        result = await service.list_catalog(CatalogRequest.from_query(category_ids))
        return CatalogListResponse.model_validate(
            {
                "products": [p.to_dict() for p in result.products],
                "pagination": result.pagination.to_dict(),
            }
        )

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
    result = await service.list_products(listing)
    return ProductListResponse.model_validate(
        {
            "products": [p.to_dict() for p in result.products],
            "pagination": result.pagination.to_dict(),
        }
    )


@router.get(
    "/print-layout",
    response_model=PrintLayoutResponse,
    summary="Lay out a print catalog",
)
async def print_layout(
    service: CatalogServiceDep,
    category_ids: str = Query(
        default="", alias="categoryIds", description="Comma-separated category IDs"
    ),
) -> PrintLayoutResponse:
    """Group the selected categories' products under their main category
    and split them into print pages."""
    layout = await service.print_layout(CatalogRequest.from_query(category_ids))
    return PrintLayoutResponse.model_validate(layout.to_dict())


# ============================================================================
# Products
# ============================================================================


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


@router.post(
    "/products",
    response_model=ProductSchema,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(body: ProductWriteRequest, service: CatalogServiceDep) -> ProductSchema:
    """Create a product."""
    product = await service.create_product(body.to_input())
    return ProductSchema.model_validate(product.to_dict())


@router.put(
    "/products/{product_id}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Replace product",
)
async def update_product(
    product_id: int,
    body: ProductWriteRequest,
    service: CatalogServiceDep,
) -> ProductSchema:
    """Replace a product's fields.

    Images no longer referenced are removed from object storage after
    the update is saved.
    """
    product = await service.update_product(product_id, body.to_input())
    return ProductSchema.model_validate(product.to_dict())


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(product_id: int, service: CatalogServiceDep) -> Response:
    """Delete a product."""
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/batch-create",
    response_model=BatchCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create products in bulk",
)
async def batch_create(body: BatchCreateRequest, service: CatalogServiceDep) -> BatchCreateResponse:
    """Create several products in one transaction."""
    products = await service.batch_create_products([item.to_input() for item in body.products])
    return BatchCreateResponse.model_validate(
        {"created": len(products), "products": [p.to_dict() for p in products]}
    )


# ============================================================================
# Categories
# ============================================================================


@router.post(
    "/categories",
    response_model=CategorySchema,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(body: CategoryCreateRequest, service: CatalogServiceDep) -> CategorySchema:
    """Create a category as the last child of its parent."""
    category = await service.create_category(body.name, body.parent_id)
    return CategorySchema.model_validate(category.to_dict())


@router.put(
    "/categories/{category_id}",
    response_model=CategorySchema,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Update category",
)
async def update_category(
    category_id: int,
    body: CategoryUpdateRequest,
    service: CatalogServiceDep,
) -> CategorySchema:
    """Rename, move or reorder a category."""
    category = await service.update_category(
        category_id,
        name=body.name,
        parent_id=body.parent_id,
        sort_order=body.sort_order,
    )
    return CategorySchema.model_validate(category.to_dict())


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete category",
)
async def delete_category(category_id: int, service: CatalogServiceDep) -> Response:
    """Delete a category that has no sub-categories and no products."""
    await service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Images
# ============================================================================


@router.put(
    "/upload/{file_name}",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Upload image",
)
async def upload_image(file_name: str, request: Request, service: CatalogServiceDep) -> UploadResponse:
    """Store the raw request body as an image."""
    body = await request.body()
    result = await service.upload_image(file_name, body, request.headers.get("content-type"))
    return UploadResponse(message="Upload succeeded", url=result.url, key=result.key)
