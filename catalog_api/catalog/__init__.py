"""Product Catalog.

Category forest, listing plans, print layout, row projection and the
service that ties them to storage.
"""

from catalog_api.catalog.layout import CatalogOrderer, LayoutMetrics, PrintLayout
from catalog_api.catalog.listing import (
    CatalogPlan,
    CatalogRequest,
    ListingPlan,
    ListingQueryPlanner,
    ListingRequest,
    Pagination,
)
from catalog_api.catalog.models import CategoryModel, ProductModel
from catalog_api.catalog.projector import Product, ProductImage, ProductRowProjector
from catalog_api.catalog.repository import CategoryRepository, ProductRepository
from catalog_api.catalog.service import CatalogService, ProductInput
from catalog_api.catalog.tree import Category, CategoryTree

__all__ = [
    # Tree
    "Category",
    "CategoryTree",
    # Listing
    "CatalogPlan",
    "CatalogRequest",
    "ListingPlan",
    "ListingQueryPlanner",
    "ListingRequest",
    "Pagination",
    # Layout
    "CatalogOrderer",
    "LayoutMetrics",
    "PrintLayout",
    # Projection
    "Product",
    "ProductImage",
    "ProductRowProjector",
    # Models
    "CategoryModel",
    "ProductModel",
    # Repository
    "CategoryRepository",
    "ProductRepository",
    # Service
    "CatalogService",
    "ProductInput",
]
