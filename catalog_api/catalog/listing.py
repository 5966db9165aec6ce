"""Listing request shaping.

Turns raw query parameters into bounded, deterministic fetch plans.
Two shapes exist:

- single mode: optional category (expanded to its subtree), optional
  search term, sort field and direction, page and limit;
- catalog mode: an explicit list of category ids used as-is (never
  expanded), ordered in depth-first catalog order and capped.

Plans are plain data. ``ProductRepository`` compiles them to SQL; the
``apply`` methods evaluate the same plan over products already in memory.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catalog_api.catalog.projector import Product
from catalog_api.catalog.tree import CategoryTree
from catalog_api.infrastructure.config import settings

# Greater than any digit, so a category with children sorts after them.
PARENT_SORT_SUFFIX = "~"
UNKNOWN_CATEGORY_SORT_KEY = "~"


class SortField(str, Enum):
    """Sortable product fields (public names)."""

    PRICE = "price"
    NAME = "name"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def attribute(self) -> str:
        """Attribute name on ``Product`` and on the ORM model."""
        return {
            SortField.PRICE: "price",
            SortField.NAME: "name",
            SortField.CREATED_AT: "created_at",
            SortField.UPDATED_AT: "updated_at",
        }[self]


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SearchField(str, Enum):
    """Product fields matched by the search term."""

    NAME = "name"
    SKU = "sku"
    EAN13 = "ean13"


ADMIN_SEARCH_FIELDS = (SearchField.NAME, SearchField.SKU)
PUBLIC_SEARCH_FIELDS = (SearchField.NAME, SearchField.SKU, SearchField.EAN13)


def _parse_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number >= 1 else default


def _parse_optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


# ============================================================================
# Requests
# ============================================================================


@dataclass(frozen=True)
class ListingRequest:
    """Normalized single-mode listing request.

    Attributes:
        category_id: Category whose subtree to list (None for all).
        search: Case-insensitive substring to match.
        sort_by: Sort field.
        order: Sort direction.
        page: Page number (1-indexed).
        limit: Items per page.
    """

    category_id: int | None = None
    search: str | None = None
    sort_by: SortField = SortField.UPDATED_AT
    order: SortOrder = SortOrder.DESC
    page: int = 1
    limit: int = 24

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "ListingRequest":
        """Build a request from raw query parameters.

        Invalid values never raise: they fall back to defaults.

        Args:
            params: Query parameters (``page``, ``limit``, ``categoryId``,
                ``search``, ``sortBy``, ``order``).

        Returns:
            Normalized request.
        """
        page = _parse_positive_int(params.get("page"), 1)
        limit = min(
            _parse_positive_int(params.get("limit"), settings.default_page_limit),
            settings.max_page_limit,
        )

        try:
            sort_by = SortField(params.get("sortBy"))
        except ValueError:
            sort_by = SortField.UPDATED_AT

        raw_order = params.get("order")
        order = SortOrder.ASC if str(raw_order).lower() == "asc" else SortOrder.DESC

        search = (params.get("search") or "").strip() or None

        return cls(
            category_id=_parse_optional_int(params.get("categoryId")),
            search=search,
            sort_by=sort_by,
            order=order,
            page=page,
            limit=limit,
        )


@dataclass(frozen=True)
class CatalogRequest:
    """Explicit multi-category catalog request.

    Attributes:
        category_ids: Requested ids in first-seen order, without duplicates.
    """

    category_ids: tuple[int, ...] = ()

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> "CatalogRequest":
        """Build a request from integer ids, dropping duplicates."""
        return cls(category_ids=tuple(dict.fromkeys(ids)))

    @classmethod
    def from_query(cls, raw: str | None) -> "CatalogRequest":
        """Parse a comma-separated ``categoryIds`` value.

        Non-numeric tokens are ignored.
        """
        ids = []
        for token in (raw or "").split(","):
            value = _parse_optional_int(token) if token.strip() else None
            if value is not None:
                ids.append(value)
        return cls.from_ids(ids)


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class Pagination:
    """Single-mode pagination stats."""

    current_page: int
    total_pages: int
    total_products: int
    limit: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        """Compute stats for ``total`` filtered products."""
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit > 0 else 0,
            total_products=total,
            limit=limit,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalProducts": self.total_products,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class CatalogPagination:
    """Catalog-mode stats: the returned count, no pages."""

    total_products: int
    is_catalog_mode: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "isCatalogMode": self.is_catalog_mode,
            "totalProducts": self.total_products,
        }


@dataclass
class ListingResult:
    """Products plus single-mode pagination."""

    products: list[Product]
    pagination: Pagination


@dataclass
class CatalogResult:
    """Products plus catalog-mode stats."""

    products: list[Product]
    pagination: CatalogPagination


# ============================================================================
# Plans
# ============================================================================


def _price_missing(product: Product) -> bool:
    return not product.has_price


@dataclass(frozen=True)
class ListingPlan:
    """Single-mode fetch plan.

    Attributes:
        category_ids: Allowed category ids (None = no category filter).
        search: Search term (None = no search filter).
        search_fields: Fields the search term is matched against.
        sort_by: Sort field.
        order: Sort direction.
        page: Page number.
        limit: Page size.
    """

    category_ids: frozenset[int] | None
    search: str | None
    search_fields: tuple[SearchField, ...]
    sort_by: SortField
    order: SortOrder
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, product: Product) -> bool:
        """Check a product against the filter predicate."""
        if self.category_ids is not None and product.category_id not in self.category_ids:
            return False
        if self.search:
            term = self.search.lower()
            values = (getattr(product, f.value) for f in self.search_fields)
            if not any(term in (value or "").lower() for value in values):
                return False
        return True

    def sort(self, products: Iterable[Product]) -> list[Product]:
        """Order products by the plan's sort field.

        Missing prices sort last in either direction; ties break on id
        in the requested direction.
        """
        reverse = self.order is SortOrder.DESC
        attribute = self.sort_by.attribute
        ordered = sorted(products, key=lambda p: p.id, reverse=reverse)
        if self.sort_by is SortField.PRICE:
            priced = [p for p in ordered if p.has_price]
            unpriced = [p for p in ordered if not p.has_price]
            priced.sort(key=lambda p: p.price, reverse=reverse)
            return priced + unpriced
        present = [p for p in ordered if getattr(p, attribute) is not None]
        absent = [p for p in ordered if getattr(p, attribute) is None]
        present.sort(key=lambda p: getattr(p, attribute), reverse=reverse)
        return present + absent

    def apply(self, products: Iterable[Product]) -> ListingResult:
        """Evaluate the plan over in-memory products."""
        matching = self.sort(p for p in products if self.matches(p))
        page = matching[self.offset:self.offset + self.limit]
        return ListingResult(
            products=page,
            pagination=Pagination.build(len(matching), self.page, self.limit),
        )


@dataclass(frozen=True)
class CatalogPlan:
    """Catalog-mode fetch plan.

    Attributes:
        category_ids: Exact category ids to select.
        sort_keys: Catalog sort key per requested id.
        limit: Row cap.
    """

    category_ids: tuple[int, ...]
    sort_keys: Mapping[int, str] = field(default_factory=dict)
    limit: int = 500

    @property
    def is_empty(self) -> bool:
        return not self.category_ids

    @property
    def category_ranks(self) -> dict[int, int]:
        """Position of each requested category in catalog order.

        Categories are ranked by sort key; equal keys (siblings sharing
        a sort order) break ties on id.
        """
        ordered = sorted(
            self.category_ids,
            key=lambda cid: (self.sort_keys.get(cid, UNKNOWN_CATEGORY_SORT_KEY), cid),
        )
        return {cid: rank for rank, cid in enumerate(ordered)}

    def sort_key(self, product: Product, ranks: Mapping[int, int] | None = None) -> tuple:
        """Catalog ordering key of a product."""
        ranks = ranks if ranks is not None else self.category_ranks
        return (
            ranks.get(product.category_id, len(ranks)),
            _price_missing(product),
            product.price if product.has_price else 0,
            product.id,
        )

    def apply(self, products: Iterable[Product]) -> CatalogResult:
        """Evaluate the plan over in-memory products."""
        if self.is_empty:
            return CatalogResult(products=[], pagination=CatalogPagination(total_products=0))
        ranks = self.category_ranks
        matching = sorted(
            (p for p in products if p.category_id in ranks),
            key=lambda p: self.sort_key(p, ranks),
        )
        capped = matching[: self.limit]
        return CatalogResult(
            products=capped,
            pagination=CatalogPagination(total_products=len(capped)),
        )


# ============================================================================
# Planner
# ============================================================================


class ListingQueryPlanner:
    """Builds fetch plans against a category snapshot.

    Example usage:
        planner = ListingQueryPlanner(tree)
        plan = planner.plan_listing(ListingRequest.from_query(params))
    """

    def __init__(self, tree: CategoryTree, catalog_row_cap: int | None = None) -> None:
        """Initialize planner.

        Args:
            tree: Category snapshot for the current request.
            catalog_row_cap: Row cap for catalog mode.
        """
        self.tree = tree
        self.catalog_row_cap = catalog_row_cap or settings.catalog_row_cap

    def plan_listing(
        self,
        request: ListingRequest,
        search_fields: Sequence[SearchField] = ADMIN_SEARCH_FIELDS,
    ) -> ListingPlan:
        """Plan a single-mode listing.

        Args:
            request: Normalized listing request.
            search_fields: Fields the search term is matched against.

        Returns:
            Listing plan with the category filter expanded to its subtree.
        """
        category_ids = None
        if request.category_id is not None:
            category_ids = frozenset(self.tree.descendant_ids(request.category_id))

        return ListingPlan(
            category_ids=category_ids,
            search=request.search,
            search_fields=tuple(search_fields),
            sort_by=request.sort_by,
            order=request.order,
            page=max(request.page, 1),
            limit=max(request.limit, 1),
        )

    def catalog_sort_key(self, category_id: int) -> str:
        """Get the catalog-mode sort key of a category.

        A category with children gets a maximal suffix so that products
        attached to it directly follow those of its sub-categories.
        """
        if category_id not in self.tree:
            return UNKNOWN_CATEGORY_SORT_KEY
        path = self.tree.sort_path(category_id)
        if self.tree.has_children(category_id):
            return f"{path}_{PARENT_SORT_SUFFIX}"
        return path

    def plan_catalog(self, request: CatalogRequest) -> CatalogPlan:
        """Plan a catalog-mode listing.

        The requested ids are used exactly; callers pass every leaf they
        want included.
        """
        return CatalogPlan(
            category_ids=request.category_ids,
            sort_keys={cid: self.catalog_sort_key(cid) for cid in request.category_ids},
            limit=self.catalog_row_cap,
        )
