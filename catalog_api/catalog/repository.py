"""Catalog repositories for database operations.

Compile listing plans to SQL and provide CRUD for categories and products.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.catalog.listing import CatalogPlan, ListingPlan, SortField, SortOrder
from catalog_api.catalog.models import CategoryModel, ProductModel


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            categories = await repo.list_all()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def list_all(self) -> Sequence[CategoryModel]:
        """Get all categories ordered by parent, then sort order."""
        query = select(CategoryModel).order_by(
            CategoryModel.parent_id,
            CategoryModel.sort_order,
            CategoryModel.id,
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get(self, category_id: int) -> CategoryModel | None:
        """Get category by ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(CategoryModel, category_id)

    async def add(self, category: CategoryModel) -> CategoryModel:
        """Insert a category and assign its ID."""
        self.session.add(category)
        await self.session.flush()
        return category

    async def delete(self, category: CategoryModel) -> None:
        await self.session.delete(category)
        await self.session.flush()

    async def count_children(self, category_id: int) -> int:
        """Count direct sub-categories (a self-reference does not count)."""
        query = select(func.count(CategoryModel.id)).where(
            and_(
                CategoryModel.parent_id == category_id,
                CategoryModel.id != category_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def max_sort_order(self, parent_id: int | None) -> int | None:
        """Get the largest sort order among children of ``parent_id``.

        Returns:
            Largest sort order, or None if there are no siblings.
        """
        if parent_id is None:
            condition = CategoryModel.parent_id.is_(None)
        else:
            condition = CategoryModel.parent_id == parent_id
        query = select(func.max(CategoryModel.sort_order)).where(condition)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def descendant_ids_recursive(self, category_id: int) -> set[int]:
        """Get the descendant-inclusive set with a recursive query.

        Uses UNION rather than UNION ALL so that cyclic parent pointers
        terminate.

        Args:
            category_id: Root of the subtree.

        Returns:
            ``category_id`` plus every transitively reachable child.
        """
        category_cte = (
            select(CategoryModel.id.label("id"))
            .where(CategoryModel.id == category_id)
            .cte(name="descendant_categories", recursive=True)
        )
        recursive_part = select(CategoryModel.id).join(
            category_cte, CategoryModel.parent_id == category_cte.c.id
        )
        full_cte = category_cte.union(recursive_part)

        result = await self.session.execute(select(full_cte.c.id))
        return {category_id} | set(result.scalars().all())


class ProductRepository:
    """Repository for Product database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            rows = await repo.find_listing(plan)
            total = await repo.count_listing(plan)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    # ------------------------------------------------------------------
    # Listing plans
    # ------------------------------------------------------------------

    @staticmethod
    def _price_missing() -> Any:
        """SQL flag: 1 when the price is NULL or non-positive, else 0."""
        return case(
            (or_(ProductModel.price.is_(None), ProductModel.price <= 0), 1),
            else_=0,
        )

    def _listing_conditions(self, plan: ListingPlan) -> list[Any]:
        conditions = []

        if plan.category_ids is not None:
            conditions.append(ProductModel.category_id.in_(sorted(plan.category_ids)))

        if plan.search:
            conditions.append(
                or_(
                    *(
                        getattr(ProductModel, field.value).icontains(plan.search, autoescape=True)
                        for field in plan.search_fields
                    )
                )
            )

        return conditions

    def _listing_order(self, plan: ListingPlan) -> list[Any]:
        def directed(column: Any) -> Any:
            return column.desc() if plan.order is SortOrder.DESC else column.asc()

        if plan.sort_by is SortField.PRICE:
            missing = self._price_missing()
            return [
                missing.asc(),
                directed(case((missing == 1, 0), else_=ProductModel.price)),
                directed(ProductModel.id),
            ]
        column = getattr(ProductModel, plan.sort_by.attribute)
        return [directed(column), directed(ProductModel.id)]

    async def find_listing(self, plan: ListingPlan) -> Sequence[ProductModel]:
        """Fetch one page of a single-mode listing.

        Args:
            plan: Listing plan.

        Returns:
            Products on the requested page, in plan order.
        """
        query = select(ProductModel)

        conditions = self._listing_conditions(plan)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(*self._listing_order(plan))
        query = query.limit(plan.limit).offset(plan.offset)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_listing(self, plan: ListingPlan) -> int:
        """Count all products matching a listing plan's filter."""
        query = select(func.count(ProductModel.id))

        conditions = self._listing_conditions(plan)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_catalog(self, plan: CatalogPlan) -> Sequence[ProductModel]:
        """Fetch a catalog-mode listing.

        Args:
            plan: Catalog plan.

        Returns:
            Up to ``plan.limit`` products in catalog order.
        """
        if plan.is_empty:
            return []

        ranks = plan.category_ranks
        missing = self._price_missing()
        query = (
            select(ProductModel)
            .where(ProductModel.category_id.in_(list(plan.category_ids)))
            .order_by(
                case(ranks, value=ProductModel.category_id, else_=len(ranks)).asc(),
                missing.asc(),
                case((missing == 1, 0), else_=ProductModel.price).asc(),
                ProductModel.id.asc(),
            )
            .limit(plan.limit)
        )

        result = await self.session.execute(query)
        return result.scalars().all()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get(self, product_id: int) -> ProductModel | None:
        """Get product by ID.

        Returns:
            Product if found, None otherwise.
        """
        return await self.session.get(ProductModel, product_id)

    async def add(self, product: ProductModel) -> ProductModel:
        """Insert a product and assign its ID."""
        self.session.add(product)
        await self.session.flush()
        return product

    async def add_all(self, products: list[ProductModel]) -> list[ProductModel]:
        """Insert several products in one flush."""
        self.session.add_all(products)
        await self.session.flush()
        return products

    async def delete(self, product: ProductModel) -> None:
        await self.session.delete(product)
        await self.session.flush()

    async def count_in_category(self, category_id: int) -> int:
        """Count products assigned directly to a category."""
        query = select(func.count(ProductModel.id)).where(
            ProductModel.category_id == category_id
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    # ------------------------------------------------------------------
    # Sitemap and cover images
    # ------------------------------------------------------------------

    async def list_sitemap_entries(self) -> list[dict[str, Any]]:
        """Get id, name and last update of every product."""
        query = select(ProductModel.id, ProductModel.name, ProductModel.updated_at).order_by(
            ProductModel.id
        )
        result = await self.session.execute(query)
        return [
            {"id": row.id, "name": row.name, "updated_at": row.updated_at}
            for row in result.all()
        ]

    async def random_image_list(self, category_ids: set[int]) -> str | None:
        """Get the stored image list of a random product with images.

        Args:
            category_ids: Categories to pick from.

        Returns:
            Stored image list text, or None if no product has images.
        """
        if not category_ids:
            return None
        query = (
            select(ProductModel.image_urls)
            .where(
                and_(
                    ProductModel.category_id.in_(sorted(category_ids)),
                    ProductModel.image_urls.is_not(None),
                    ProductModel.image_urls.not_in(["", "[]"]),
                )
            )
            .order_by(func.random())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
