"""API schemas for the catalog service.

Pydantic models for request/response validation and serialization.
JSON keys are camelCase.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog_api.catalog.projector import ProductImage
from catalog_api.catalog.service import ProductInput


class CamelModel(BaseModel):
    """Base model with camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list | dict = Field(default_factory=list, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for correlation")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


# ============================================================================
# Category Schemas
# ============================================================================


class CategorySchema(CamelModel):
    """Category representation."""

    id: int
    name: str
    parent_id: int | None = None
    sort_order: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class CategoryListResponse(CamelModel):
    """All categories."""

    categories: list[CategorySchema]


class CategoryOutlineEntry(CategorySchema):
    """Category with its depth in the forest."""

    depth: int = Field(..., ge=0, description="0 for roots")


class CategoryOutlineResponse(CamelModel):
    """All categories in depth-first catalog order."""

    categories: list[CategoryOutlineEntry]


class CategoryCreateRequest(CamelModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200, description="Category name")
    parent_id: int | None = Field(default=None, description="Parent category (None for root)")


class CategoryUpdateRequest(CamelModel):
    """Request to rename, move or reorder a category."""

    name: str = Field(..., min_length=1, max_length=200, description="Category name")
    parent_id: int | None = Field(default=None, description="Parent category (None for root)")
    sort_order: int | None = Field(
        default=None, ge=0, description="Position among siblings (kept if omitted)"
    )


class CategoryCoverResponse(CamelModel):
    """Representative image of a category page."""

    category_id: int
    image_url: str


# ============================================================================
# Product Schemas
# ============================================================================


class ImageSchema(BaseModel):
    """Product image."""

    url: str = Field(..., min_length=1, description="Public image URL")
    size: int = Field(default=100, ge=1, le=100, description="Display size percentage")


class ProductSchema(CamelModel):
    """Product representation."""

    id: int
    sku: str | None = None
    name: str
    ean13: str | None = None
    price: float | None = None
    description: str = ""
    image_urls: list[ImageSchema] = Field(default_factory=list)
    category_id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ProductWriteRequest(CamelModel):
    """Request to create or fully replace a product."""

    name: str = Field(..., min_length=1, max_length=500, description="Product name")
    category_id: int = Field(..., description="Owning category")
    sku: str | None = Field(default=None, max_length=100, description="Stock keeping unit")
    ean13: str | None = Field(default=None, max_length=13, description="EAN-13 barcode")
    price: Decimal | None = Field(default=None, description="Price (None = price pending)")
    description: str = Field(default="", description="Product description")
    image_urls: list[ImageSchema] = Field(
        default_factory=list, description="Ordered images, cover first"
    )

    def to_input(self) -> ProductInput:
        """Convert to service input."""
        return ProductInput(
            name=self.name,
            category_id=self.category_id,
            sku=self.sku,
            ean13=self.ean13,
            price=self.price,
            description=self.description,
            images=[ProductImage(url=image.url, size=image.size) for image in self.image_urls],
        )


class BatchCreateRequest(CamelModel):
    """Request to create several products at once."""

    products: list[ProductWriteRequest] = Field(..., min_length=1, max_length=500)


class BatchCreateResponse(CamelModel):
    """Created products."""

    created: int
    products: list[ProductSchema]


# ============================================================================
# Listing Schemas
# ============================================================================


class PaginationSchema(CamelModel):
    """Single-mode pagination stats."""

    current_page: int
    total_pages: int
    total_products: int
    limit: int


class CatalogPaginationSchema(CamelModel):
    """Catalog-mode stats."""

    is_catalog_mode: Literal[True]
    total_products: int


class ProductListResponse(CamelModel):
    """A page of products."""

    products: list[ProductSchema]
    pagination: PaginationSchema


class CatalogListResponse(CamelModel):
    """Products of explicitly selected categories."""

    products: list[ProductSchema]
    pagination: CatalogPaginationSchema


# ============================================================================
# Upload / Print Schemas
# ============================================================================


class UploadResponse(BaseModel):
    """Stored image location."""

    message: str
    url: str
    key: str


class LayoutUnitSchema(CamelModel):
    """Heading or product card on a print page."""

    kind: Literal["heading", "product"]
    page: int
    title: str | None = None
    category_id: int | None = None
    product: ProductSchema | None = None


class LayoutPageSchema(CamelModel):
    """A print page."""

    number: int
    units: list[LayoutUnitSchema]


class PrintLayoutResponse(CamelModel):
    """Laid-out print catalog."""

    page_count: int
    pages: list[LayoutPageSchema]
