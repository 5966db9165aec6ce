"""Print catalog layout.

Lays an already-ordered catalog-mode product list out into fixed
capacity pages, grouped under the main category each product belongs
to: the category one level below its forest root. Capacity is measured
in abstract units: a heading and a product card each have a fixed cost,
a page holds ``page_capacity``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catalog_api.catalog.projector import Product
from catalog_api.catalog.tree import CategoryTree
from catalog_api.infrastructure.config import settings


class UnitKind(str, Enum):
    """Kind of a laid-out unit."""

    HEADING = "heading"
    PRODUCT = "product"


@dataclass(frozen=True)
class LayoutMetrics:
    """Capacity costs of a print page.

    Attributes:
        page_capacity: Content capacity of one page.
        heading_cost: Cost of a group heading.
        product_cost: Cost of a product card.
    """

    page_capacity: int = 1000
    heading_cost: int = 60
    product_cost: int = 180

    @classmethod
    def from_settings(cls) -> "LayoutMetrics":
        return cls(
            page_capacity=settings.print_page_capacity,
            heading_cost=settings.print_heading_cost,
            product_cost=settings.print_product_cost,
        )


@dataclass
class LayoutUnit:
    """A heading or product card placed on a page.

    Attributes:
        kind: Heading or product.
        page: 1-based page number the unit landed on.
        title: Heading text (headings only).
        category_id: Main category of the group (headings only).
        product: The product (product cards only).
    """

    kind: UnitKind
    page: int = 0
    title: str | None = None
    category_id: int | None = None
    product: Product | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "page": self.page}
        if self.kind is UnitKind.HEADING:
            data["title"] = self.title
            data["categoryId"] = self.category_id
        else:
            data["product"] = self.product.to_dict() if self.product else None
        return data


@dataclass
class LayoutPage:
    """One print page."""

    number: int
    units: list[LayoutUnit] = field(default_factory=list)
    used: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "units": [unit.to_dict() for unit in self.units],
        }


@dataclass
class PrintLayout:
    """The laid-out catalog."""

    pages: list[LayoutPage]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def units(self) -> list[LayoutUnit]:
        """All units in reading order."""
        return [unit for page in self.pages for unit in page.units]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageCount": self.page_count,
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass
class _Group:
    main_id: int | None
    products: list[Product] = field(default_factory=list)


class CatalogOrderer:
    """Groups products by main category and paginates them.

    Example usage:
        orderer = CatalogOrderer(tree, LayoutMetrics.from_settings())
        layout = orderer.layout(result.products)
    """

    def __init__(self, tree: CategoryTree, metrics: LayoutMetrics | None = None) -> None:
        self.tree = tree
        self.metrics = metrics or LayoutMetrics.from_settings()

    def group(self, products: list[Product]) -> list[_Group]:
        """Group products by main ancestor.

        Groups keep the order in which they are first encountered and
        products keep their relative order. Products whose category does
        not resolve form a final group with no main category.
        """
        groups: dict[int, _Group] = {}
        unclassified = _Group(main_id=None)
        for product in products:
            main = (
                self.tree.main_ancestor(product.category_id)
                if product.category_id is not None
                else None
            )
            if main is None:
                unclassified.products.append(product)
                continue
            groups.setdefault(main.id, _Group(main_id=main.id)).products.append(product)

        ordered = list(groups.values())
        if unclassified.products:
            ordered.append(unclassified)
        return ordered

    def layout(self, products: list[Product]) -> PrintLayout:
        """Lay products out into pages.

        A unit that does not fit the current page moves alone to a new
        page. A unit larger than a whole page stays on an empty page.

        Args:
            products: Products in catalog order.

        Returns:
            Pages numbered 1..N.
        """
        pages = [LayoutPage(number=0)]

        def place(unit: LayoutUnit, cost: int) -> None:
            page = pages[-1]
            if page.units and page.used + cost > self.metrics.page_capacity:
                page = LayoutPage(number=0)
                pages.append(page)
            page.units.append(unit)
            page.used += cost

        for group in self.group(products):
            if group.main_id is not None:
                heading = LayoutUnit(
                    kind=UnitKind.HEADING,
                    title=self.tree.display_path(group.main_id),
                    category_id=group.main_id,
                )
                place(heading, self.metrics.heading_cost)
            for product in group.products:
                place(LayoutUnit(kind=UnitKind.PRODUCT, product=product), self.metrics.product_cost)

        for number, page in enumerate(pages, start=1):
            page.number = number
            for unit in page.units:
                unit.page = number

        return PrintLayout(pages=pages)
