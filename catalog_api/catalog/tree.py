"""Category forest.

Categories are stored as flat rows with a parent pointer and a sibling
sort order. This module builds an in-memory snapshot of those rows and
answers the hierarchy questions every listing path needs:

    descendant_ids(1)   -> {1, 2, 3, 4}
    sort_path(4)        -> "0000_0000_0000"
    main_ancestor(4)    -> Category(id=2, ...)
    display_path(2)     -> "Sporting Goods - Balls"

Stored data is not trusted to be acyclic or referentially complete, so
every traversal keeps a visited set.
"""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

SORT_PATH_WIDTH = 4
SORT_PATH_SEPARATOR = "_"


@dataclass
class Category:
    """A catalog category.

    Attributes:
        id: Category ID.
        name: Display name.
        parent_id: ID of parent category (None for root).
        sort_order: Position among siblings.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
        children: Child categories, filled by ``CategoryTree.build_forest``.
    """

    id: int
    name: str
    parent_id: int | None = None
    sort_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    children: list["Category"] = field(default_factory=list, repr=False)

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        """Create from a storage row (ORM object or mapping)."""
        get = row.get if isinstance(row, dict) else lambda name: getattr(row, name, None)
        return cls(
            id=get("id"),
            name=get("name") or "",
            parent_id=get("parent_id"),
            sort_order=get("sort_order") or 0,
            created_at=get("created_at"),
            updated_at=get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public dictionary shape."""
        return {
            "id": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "sortOrder": self.sort_order,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class CategoryTree:
    """In-memory snapshot of the category forest.

    The snapshot is built per request from ``CategoryRepository.list_all``
    and never shared between requests.

    Example usage:
        tree = CategoryTree(categories)
        ids = tree.descendant_ids(category_id)
    """

    def __init__(self, categories: Iterable[Category]) -> None:
        """Index categories by id and by parent.

        Args:
            categories: Flat category snapshot.
        """
        self._categories: dict[int, Category] = {}
        self._children: dict[int | None, list[int]] = {}

        for category in categories:
            self._categories[category.id] = category

        for category in self._categories.values():
            self._children.setdefault(category.parent_id, []).append(category.id)

        for child_ids in self._children.values():
            child_ids.sort(key=lambda cid: (self._categories[cid].sort_order, cid))

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def get(self, category_id: int | None) -> Category | None:
        """Get category by ID.

        Returns:
            Category if found, None otherwise.
        """
        if category_id is None:
            return None
        return self._categories.get(category_id)

    def child_ids(self, category_id: int | None) -> list[int]:
        """Get direct child IDs ordered by sort order, then id."""
        return [
            cid for cid in self._children.get(category_id, [])
            if cid != category_id
        ]

    def has_children(self, category_id: int) -> bool:
        """Check whether a category has at least one child."""
        return bool(self.child_ids(category_id))

    def _is_root(self, category: Category) -> bool:
        return category.parent_id is None or category.parent_id not in self._categories

    def root_ids(self) -> list[int]:
        """Get IDs of root categories, including those with a dangling parent."""
        roots = [c for c in self._categories.values() if self._is_root(c)]
        roots.sort(key=lambda c: (c.sort_order, c.id))
        return [c.id for c in roots]

    def descendant_ids(self, root_id: int) -> set[int]:
        """Get the descendant-inclusive set of a category.

        Breadth-first over child links. An unknown ``root_id`` still
        yields ``{root_id}`` so products pointing at it keep matching.

        Args:
            root_id: Category to expand.

        Returns:
            ``root_id`` plus every transitively reachable child.
        """
        visited = {root_id}
        queue = deque([root_id])
        while queue:
            current = queue.popleft()
            for child_id in self._children.get(current, []):
                if child_id not in visited:
                    visited.add(child_id)
                    queue.append(child_id)
        return visited

    def build_forest(self) -> list[Category]:
        """Attach every category to its parent's ``children`` list.

        Categories whose parent does not resolve are returned as extra
        roots. Categories caught in a parent cycle are unreachable from
        any root; the first of each cycle (lowest id) is promoted to a
        root so that nothing is dropped.

        Returns:
            Root categories ordered by sort order, then id.
        """
        for category in self._categories.values():
            category.children = []

        roots = [self._categories[cid] for cid in self.root_ids()]
        attached: set[int] = set()

        def attach(root: Category) -> None:
            attached.add(root.id)
            stack = [root]
            while stack:
                node = stack.pop()
                for child_id in self.child_ids(node.id):
                    if child_id in attached:
                        continue
                    attached.add(child_id)
                    child = self._categories[child_id]
                    node.children.append(child)
                    stack.append(child)

        for root in roots:
            attach(root)

        for category_id in sorted(self._categories):
            if category_id not in attached:
                orphan = self._categories[category_id]
                roots.append(orphan)
                attach(orphan)

        return roots

    def flatten(self) -> list[tuple[Category, int]]:
        """Get all categories in depth-first catalog order.

        Returns:
            ``(category, depth)`` pairs, roots at depth 0.
        """
        result: list[tuple[Category, int]] = []
        stack = [(root, 0) for root in reversed(self.build_forest())]
        while stack:
            node, depth = stack.pop()
            result.append((node, depth))
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return result

    def ancestors(self, category_id: int) -> list[Category]:
        """Get the root-to-node chain for a category.

        Stops at a root, a dangling parent, or the first repeated id.

        Returns:
            Categories from the forest root down to ``category_id``,
            or an empty list if the id does not resolve.
        """
        chain: list[Category] = []
        seen: set[int] = set()
        current = self._categories.get(category_id)
        while current is not None and current.id not in seen:
            seen.add(current.id)
            chain.append(current)
            current = self.get(current.parent_id)
        chain.reverse()
        return chain

    def sort_path(self, category_id: int) -> str:
        """Get the lexicographic sort key of a category.

        Zero-padded sort orders from root to node, e.g. a root with sort
        order 2 and its child with sort order 0 give ``"0002_0000"``.
        Negative sort orders count as 0.

        Returns:
            Sort key, or ``""`` for an unknown id.
        """
        return SORT_PATH_SEPARATOR.join(
            f"{max(c.sort_order, 0):0{SORT_PATH_WIDTH}d}" for c in self.ancestors(category_id)
        )

    def main_ancestor(self, category_id: int) -> Category | None:
        """Get the main category a category nests under.

        The main category sits one level below the forest root: its own
        parent is a root. A root is its own main ancestor.

        Returns:
            The main category, or None if the id does not resolve.
        """
        chain = self.ancestors(category_id)
        if not chain:
            return None
        return chain[1] if len(chain) > 1 else chain[0]

    def display_path(self, category_id: int, separator: str = " - ") -> str:
        """Get root-to-node names for human-facing titles.

        Returns:
            Joined names (e.g., "Sporting Goods - Basketballs"), or ``""``
            for an unknown id.
        """
        return separator.join(c.name for c in self.ancestors(category_id))

    def is_descendant(self, category_id: int, ancestor_id: int) -> bool:
        """Check whether ``category_id`` lies in the subtree of ``ancestor_id``."""
        return category_id in self.descendant_ids(ancestor_id)

    def next_sort_order(self, parent_id: int | None) -> int:
        """Get the sort order for a new child of ``parent_id``.

        Returns:
            One more than the largest sibling sort order, 0 if no siblings.
        """
        siblings = [self._categories[cid] for cid in self._children.get(parent_id, [])]
        if not siblings:
            return 0
        return max(c.sort_order for c in siblings) + 1
