"""Catalog service for storefront, admin and print operations.

High-level service that combines the repositories with the category
snapshot, the listing planner and the row projector. One instance serves
one request; nothing is cached between requests.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import PurePosixPath
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.catalog.layout import CatalogOrderer, LayoutMetrics, PrintLayout
from catalog_api.catalog.listing import (
    ADMIN_SEARCH_FIELDS,
    PUBLIC_SEARCH_FIELDS,
    CatalogRequest,
    CatalogResult,
    ListingQueryPlanner,
    ListingRequest,
    ListingResult,
    Pagination,
)
from catalog_api.catalog.models import CategoryModel, ProductModel, utcnow
from catalog_api.catalog.projector import Product, ProductImage, ProductRowProjector
from catalog_api.catalog.repository import CategoryRepository, ProductRepository
from catalog_api.catalog.sitemap import build_sitemap
from catalog_api.catalog.tree import Category, CategoryTree
from catalog_api.domain.exceptions import (
    CatalogError,
    CategoryNotEmptyError,
    CategoryNotFoundError,
    DuplicateSkuError,
    InvalidCategoryParentError,
    ProductNotFoundError,
)
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.object_storage import ObjectStorage, get_object_storage

logger = structlog.get_logger()


@dataclass
class ProductInput:
    """Mutable product fields, as submitted by the admin UI.

    Attributes:
        name: Product name.
        category_id: Owning category.
        sku: Stock keeping unit; blank means unset.
        ean13: EAN-13 barcode.
        price: Price; None means "price pending".
        description: Product description.
        images: Ordered images, cover first.
    """

    name: str
    category_id: int
    sku: str | None = None
    ean13: str | None = None
    price: Decimal | None = None
    description: str = ""
    images: list[ProductImage] = field(default_factory=list)


@dataclass
class UploadResult:
    """Stored image location."""

    url: str
    key: str


class CatalogService:
    """Service for catalog operations.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)
            result = await service.list_products(ListingRequest(category_id=3))
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: ObjectStorage | None = None,
        projector: ProductRowProjector | None = None,
        metrics: LayoutMetrics | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
            storage: Image bucket client.
            projector: Product row projector.
            metrics: Print page metrics.
        """
        self.session = session
        self.categories = CategoryRepository(session)
        self.products = ProductRepository(session)
        self.storage = storage or get_object_storage()
        self.projector = projector or ProductRowProjector()
        self.metrics = metrics or LayoutMetrics.from_settings()

    async def load_tree(self) -> CategoryTree:
        """Load the category snapshot for this request."""
        rows = await self.categories.list_all()
        return CategoryTree(Category.from_row(row) for row in rows)

    # ========================================================================
    # Listing
    # ========================================================================

    async def list_products(self, request: ListingRequest, public: bool = False) -> ListingResult:
        """List one page of products.

        Args:
            request: Normalized listing request.
            public: Whether the storefront variant is used (search also
                matches EAN-13).

        Returns:
            Page of products with pagination stats.
        """
        tree = await self.load_tree()
        plan = ListingQueryPlanner(tree).plan_listing(
            request,
            search_fields=PUBLIC_SEARCH_FIELDS if public else ADMIN_SEARCH_FIELDS,
        )

        rows = await self.products.find_listing(plan)
        total = await self.products.count_listing(plan)

        return ListingResult(
            products=self.projector.to_products(rows),
            pagination=Pagination.build(total, plan.page, plan.limit),
        )

    async def list_catalog(self, request: CatalogRequest) -> CatalogResult:
        """List the products of explicitly selected categories.

        Selected ids are not expanded to their sub-categories.
        """
        tree = await self.load_tree()
        return await self._fetch_catalog(tree, request)

    async def _fetch_catalog(self, tree: CategoryTree, request: CatalogRequest) -> CatalogResult:
        plan = ListingQueryPlanner(tree).plan_catalog(request)
        if plan.is_empty:
            return plan.apply([])

        rows = await self.products.find_catalog(plan)
        products = self.projector.to_products(rows)
        logger.info(
            "Catalog listing",
            category_count=len(plan.category_ids),
            product_count=len(products),
        )
        return plan.apply(products)

    async def print_layout(self, request: CatalogRequest) -> PrintLayout:
        """Lay the selected categories out into print pages."""
        tree = await self.load_tree()
        result = await self._fetch_catalog(tree, request)
        layout = CatalogOrderer(tree, self.metrics).layout(result.products)
        logger.info(
            "Print layout generated",
            product_count=len(result.products),
            page_count=layout.page_count,
        )
        return layout

    async def get_product(self, product_id: int) -> Product:
        """Get product by ID.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        row = await self.products.get(product_id)
        if row is None:
            raise ProductNotFoundError(product_id)
        return self.projector.to_product(row)

    async def get_categories(self) -> list[Category]:
        """Get all categories ordered by parent, then sort order."""
        rows = await self.categories.list_all()
        return [Category.from_row(row) for row in rows]

    async def get_category_outline(self) -> list[tuple[Category, int]]:
        """Get all categories in depth-first catalog order with their depth."""
        return (await self.load_tree()).flatten()

    async def category_cover_image(self, category_id: int) -> str:
        """Get a representative image for a category page.

        Picks the cover image of a random product anywhere under the
        category, falling back to the default image.

        Raises:
            CategoryNotFoundError: If the category does not exist.
        """
        tree = await self.load_tree()
        if category_id not in tree:
            raise CategoryNotFoundError(category_id)

        text = await self.products.random_image_list(tree.descendant_ids(category_id))
        images = self.projector.load_images(text)
        return images[0].url if images else settings.default_image_url

    async def sitemap(self, base_url: str) -> str:
        """Render the sitemap for the site at ``base_url``."""
        categories = [
            {"id": row.id, "name": row.name, "updated_at": row.updated_at}
            for row in await self.categories.list_all()
        ]
        products = await self.products.list_sitemap_entries()
        return build_sitemap(base_url, categories, products)

    # ========================================================================
    # Categories
    # ========================================================================

    async def create_category(self, name: str, parent_id: int | None = None) -> Category:
        """Create a category as the last child of ``parent_id``.

        Raises:
            CategoryNotFoundError: If the parent does not exist.
        """
        if parent_id is not None and await self.categories.get(parent_id) is None:
            raise CategoryNotFoundError(parent_id)

        max_order = await self.categories.max_sort_order(parent_id)
        model = CategoryModel(
            name=name.strip(),
            parent_id=parent_id,
            sort_order=0 if max_order is None else max_order + 1,
        )
        await self.categories.add(model)
        await self.session.commit()

        logger.info(
            "Category created",
            category_id=model.id,
            parent_id=parent_id,
            sort_order=model.sort_order,
        )
        return Category.from_row(model)

    async def update_category(
        self,
        category_id: int,
        name: str,
        parent_id: int | None,
        sort_order: int | None = None,
    ) -> Category:
        """Rename, reparent and reorder a category.

        A moved category without an explicit sort order goes last among
        its new siblings.

        Raises:
            CategoryNotFoundError: If the category or new parent does not exist.
            InvalidCategoryParentError: If the new parent lies in the
                category's own subtree.
        """
        tree = await self.load_tree()
        model = await self.categories.get(category_id)
        if model is None:
            raise CategoryNotFoundError(category_id)

        if parent_id is not None:
            if parent_id not in tree:
                raise CategoryNotFoundError(parent_id)
            if tree.is_descendant(parent_id, category_id):
                raise InvalidCategoryParentError(category_id, parent_id)

        if sort_order is None and parent_id != model.parent_id:
            sort_order = tree.next_sort_order(parent_id)

        model.name = name.strip()
        model.parent_id = parent_id
        if sort_order is not None:
            model.sort_order = sort_order
        model.updated_at = utcnow()

        await self.session.flush()
        await self.session.commit()

        logger.info(
            "Category updated",
            category_id=category_id,
            parent_id=parent_id,
            sort_order=model.sort_order,
        )
        return Category.from_row(model)

    async def delete_category(self, category_id: int) -> None:
        """Delete an empty category.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            CategoryNotEmptyError: If it has sub-categories or products.
        """
        model = await self.categories.get(category_id)
        if model is None:
            raise CategoryNotFoundError(category_id)

        child_count = await self.categories.count_children(category_id)
        product_count = await self.products.count_in_category(category_id)
        if child_count or product_count:
            raise CategoryNotEmptyError(category_id, child_count, product_count)

        await self.categories.delete(model)
        await self.session.commit()
        logger.info("Category deleted", category_id=category_id)

    # ========================================================================
    # Products
    # ========================================================================

    def _build_product(self, data: ProductInput) -> Product:
        return Product(
            id=0,
            name=data.name.strip(),
            sku=data.sku,
            ean13=data.ean13,
            price=data.price,
            description=data.description or "",
            images=list(data.images),
            category_id=data.category_id,
        )

    async def _require_categories(self, category_ids: set[int]) -> None:
        tree = await self.load_tree()
        for category_id in sorted(category_ids):
            if category_id not in tree:
                raise CategoryNotFoundError(category_id)

    async def _commit_products(self, skus: list[str]) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSkuError(skus) from e

    async def create_product(self, data: ProductInput) -> Product:
        """Create a product.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            DuplicateSkuError: If the SKU is already used.
        """
        await self._require_categories({data.category_id})

        values = self.projector.to_row_values(self._build_product(data))
        model = ProductModel(**values)
        try:
            await self.products.add(model)
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSkuError([values["sku"]] if values["sku"] else []) from e
        await self._commit_products([values["sku"]] if values["sku"] else [])

        logger.info("Product created", product_id=model.id, category_id=model.category_id)
        return self.projector.to_product(model)

    async def update_product(self, product_id: int, data: ProductInput) -> Product:
        """Replace the mutable fields of a product.

        Images dropped by the update are deleted from object storage once
        the database write has committed. Failed deletes are logged only.

        Raises:
            ProductNotFoundError: If the product does not exist.
            CategoryNotFoundError: If the category does not exist.
            DuplicateSkuError: If the SKU is already used.
        """
        model = await self.products.get(product_id)
        if model is None:
            raise ProductNotFoundError(product_id)
        await self._require_categories({data.category_id})

        old_images = self.projector.load_images(model.image_urls, product_id=product_id)
        product = self._build_product(data)
        values = self.projector.to_row_values(product)
        for column, value in values.items():
            setattr(model, column, value)
        model.updated_at = utcnow()

        skus = [values["sku"]] if values["sku"] else []
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSkuError(skus) from e
        await self._commit_products(skus)

        logger.info("Product updated", product_id=product_id)

        await self._delete_objects(
            self.projector.orphaned_keys(old_images, product.images),
            product_id=product_id,
        )
        return self.projector.to_product(model)

    async def delete_product(self, product_id: int) -> None:
        """Delete a product and, best effort, its stored images.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        model = await self.products.get(product_id)
        if model is None:
            raise ProductNotFoundError(product_id)

        images = self.projector.load_images(model.image_urls, product_id=product_id)
        await self.products.delete(model)
        await self.session.commit()

        logger.info("Product deleted", product_id=product_id)
        await self._delete_objects(self.projector.orphaned_keys(images, []), product_id=product_id)

    async def batch_create_products(self, items: Sequence[ProductInput]) -> list[Product]:
        """Create several products in one transaction.

        Either every product is created or none is.

        Raises:
            CategoryNotFoundError: If any category does not exist.
            DuplicateSkuError: If any SKU is already used.
        """
        if not items:
            return []
        await self._require_categories({item.category_id for item in items})

        models = [
            ProductModel(**self.projector.to_row_values(self._build_product(item)))
            for item in items
        ]
        skus = [m.sku for m in models if m.sku]
        if len(skus) != len(set(skus)):
            duplicates = sorted({sku for sku in skus if skus.count(sku) > 1})
            raise DuplicateSkuError(duplicates)

        try:
            await self.products.add_all(models)
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSkuError(skus) from e
        await self._commit_products(skus)

        logger.info("Products batch created", product_count=len(models))
        return self.projector.to_products(models)

    # ========================================================================
    # Images
    # ========================================================================

    async def upload_image(self, name: str, body: bytes, content_type: str | None) -> UploadResult:
        """Store an uploaded image under its file name.

        Raises:
            CatalogError: If the name is empty.
            ObjectStorageError: If the bucket rejects the upload.
        """
        key = PurePosixPath(name).name.strip()
        if not key:
            raise CatalogError("Missing file name", details={"name": name})

        url = await self.storage.put(key, body, content_type)
        return UploadResult(url=url, key=key)

    async def _delete_objects(self, keys: list[str], **context: Any) -> None:
        """Delete stored objects, logging and discarding failures."""
        for key in keys:
            try:
                await self.storage.delete(key)
            except Exception as e:
                logger.warning(
                    "Orphaned image cleanup failed",
                    key=key,
                    error=str(e),
                    **context,
                )
