"""Tests for the category forest."""

import pytest

from catalog_api.catalog.tree import Category, CategoryTree


class TestCategory:
    """Tests for Category dataclass."""

    def test_from_row_mapping(self) -> None:
        """Categories can be built from plain mappings."""
        category = Category.from_row({"id": 3, "name": "Rackets", "parent_id": 1, "sort_order": 2})
        assert category.id == 3
        assert category.parent_id == 1
        assert category.sort_order == 2

    def test_from_row_defaults_missing_sort_order(self) -> None:
        """A NULL sort order counts as 0."""
        category = Category.from_row({"id": 3, "name": "Rackets", "parent_id": 1, "sort_order": None})
        assert category.sort_order == 0

    def test_to_dict_uses_public_keys(self) -> None:
        category = Category(id=1, name="Sporting Goods")
        assert category.to_dict() == {
            "id": 1,
            "name": "Sporting Goods",
            "parentId": None,
            "sortOrder": 0,
            "createdAt": None,
            "updatedAt": None,
        }


class TestDescendantIds:
    """Tests for descendant expansion."""

    def test_includes_root_and_all_descendants(self, tree: CategoryTree) -> None:
        assert tree.descendant_ids(1) == {1, 2, 3, 4, 5}

    def test_leaf_is_its_own_subtree(self, tree: CategoryTree) -> None:
        assert tree.descendant_ids(4) == {4}

    def test_unknown_id_matches_itself(self, tree: CategoryTree) -> None:
        """A dangling id still matches literal equality."""
        assert tree.descendant_ids(999) == {999}

    def test_scenario_from_flat_rows(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="a", parent_id=None, sort_order=0),
                Category(id=2, name="b", parent_id=1, sort_order=0),
                Category(id=3, name="c", parent_id=1, sort_order=1),
                Category(id=4, name="d", parent_id=2, sort_order=0),
            ]
        )
        assert tree.descendant_ids(1) == {1, 2, 3, 4}

    def test_self_reference_terminates(self) -> None:
        tree = CategoryTree([Category(id=1, name="loop", parent_id=1)])
        assert tree.descendant_ids(1) == {1}

    def test_cycle_terminates(self) -> None:
        """Mutually parented categories expand to a finite set."""
        tree = CategoryTree(
            [
                Category(id=1, name="a", parent_id=3),
                Category(id=2, name="b", parent_id=1),
                Category(id=3, name="c", parent_id=2),
                Category(id=4, name="d", parent_id=3),
            ]
        )
        assert tree.descendant_ids(1) == {1, 2, 3, 4}
        assert tree.descendant_ids(4) == {4}

    def test_every_reachable_child_is_included(
        self, tree: CategoryTree, categories: list[Category]
    ) -> None:
        """Walking parent links from any member leads back to the root."""
        for category in categories:
            for member in tree.descendant_ids(category.id):
                chain = [c.id for c in tree.ancestors(member)]
                assert category.id in chain


class TestBuildForest:
    """Tests for forest construction."""

    def test_roots_in_sort_order(self, tree: CategoryTree) -> None:
        roots = tree.build_forest()
        assert [r.id for r in roots] == [1, 6]

    def test_children_attached_in_sort_order(self, tree: CategoryTree) -> None:
        roots = tree.build_forest()
        sporting = roots[0]
        assert [c.id for c in sporting.children] == [2, 3]
        assert [c.id for c in sporting.children[0].children] == [4, 5]

    def test_dangling_parent_becomes_root(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="root", parent_id=None, sort_order=0),
                Category(id=2, name="orphan", parent_id=42, sort_order=1),
            ]
        )
        assert [r.id for r in tree.build_forest()] == [1, 2]

    def test_cycle_members_are_not_dropped(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="root"),
                Category(id=5, name="a", parent_id=6),
                Category(id=6, name="b", parent_id=5),
            ]
        )
        roots = tree.build_forest()
        flat_ids = {c.id for c, _ in tree.flatten()}
        assert flat_ids == {1, 5, 6}
        assert [r.id for r in roots] == [1, 5]
        assert [c.id for c in roots[1].children] == [6]

    def test_sibling_ties_break_on_id(self) -> None:
        tree = CategoryTree(
            [
                Category(id=9, name="b", parent_id=None, sort_order=0),
                Category(id=3, name="a", parent_id=None, sort_order=0),
            ]
        )
        assert [r.id for r in tree.build_forest()] == [3, 9]

    def test_flatten_is_depth_first(self, tree: CategoryTree) -> None:
        assert [(c.id, depth) for c, depth in tree.flatten()] == [
            (1, 0), (2, 1), (4, 2), (5, 2), (3, 1), (6, 0), (7, 1),
        ]

    def test_deep_chain_does_not_recurse(self) -> None:
        """A parent chain deeper than the interpreter stack is still walked."""
        depth = 3000
        tree = CategoryTree(
            Category(id=i, name=f"c{i}", parent_id=i - 1 if i > 1 else None)
            for i in range(1, depth + 1)
        )

        roots = tree.build_forest()
        flat = tree.flatten()

        assert [r.id for r in roots] == [1]
        assert len(flat) == depth
        assert flat[-1][0].id == depth
        assert flat[-1][1] == depth - 1
        assert tree.main_ancestor(depth).id == 2


class TestSortPath:
    """Tests for sort path keys."""

    def test_scenario_paths(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="a", parent_id=None, sort_order=0),
                Category(id=2, name="b", parent_id=1, sort_order=0),
                Category(id=3, name="c", parent_id=1, sort_order=1),
                Category(id=4, name="d", parent_id=2, sort_order=0),
            ]
        )
        assert tree.sort_path(4) == "0000_0000_0000"
        assert tree.sort_path(3) == "0000_0001"
        assert tree.sort_path(4) < tree.sort_path(3)

    def test_root_and_child(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="root", sort_order=2),
                Category(id=2, name="child", parent_id=1, sort_order=0),
            ]
        )
        assert tree.sort_path(2) == "0002_0000"

    @pytest.mark.parametrize("first,second", [(0, 1), (1, 2), (9, 10), (99, 1000)])
    def test_siblings_ordered_by_sort_order(self, first: int, second: int) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="root"),
                Category(id=2, name="a", parent_id=1, sort_order=first),
                Category(id=3, name="b", parent_id=1, sort_order=second),
            ]
        )
        assert tree.sort_path(2) < tree.sort_path(3)

    def test_negative_sort_order_counts_as_zero(self) -> None:
        tree = CategoryTree([Category(id=1, name="a", sort_order=-5)])
        assert tree.sort_path(1) == "0000"

    def test_unknown_id(self, tree: CategoryTree) -> None:
        assert tree.sort_path(999) == ""

    def test_cycle_terminates(self) -> None:
        tree = CategoryTree(
            [
                Category(id=1, name="a", parent_id=2, sort_order=1),
                Category(id=2, name="b", parent_id=1, sort_order=2),
            ]
        )
        assert tree.sort_path(1) == "0002_0001"


class TestMainAncestor:
    """Tests for main ancestor lookup."""

    def test_deep_category(self, tree: CategoryTree) -> None:
        main = tree.main_ancestor(4)
        assert main is not None
        assert main.id == 2

    def test_root_is_its_own_main_ancestor(self, tree: CategoryTree) -> None:
        main = tree.main_ancestor(6)
        assert main is not None
        assert main.id == 6

    def test_unknown_id(self, tree: CategoryTree) -> None:
        assert tree.main_ancestor(999) is None

    def test_direct_child_of_root(self, tree: CategoryTree) -> None:
        main = tree.main_ancestor(3)
        assert main is not None
        assert main.id == 3

    def test_dangling_parent_stops_walk(self) -> None:
        tree = CategoryTree(
            [
                Category(id=2, name="orphan", parent_id=42),
                Category(id=3, name="child", parent_id=2),
            ]
        )
        main = tree.main_ancestor(3)
        assert main is not None
        assert main.id == 3


class TestDisplayPath:
    """Tests for display paths."""

    def test_joined_names(self, tree: CategoryTree) -> None:
        assert tree.display_path(4) == "Sporting Goods - Balls - Basketballs"

    def test_custom_separator(self, tree: CategoryTree) -> None:
        assert tree.display_path(7, separator=" > ") == "Outdoor > Tents"

    def test_unknown_id(self, tree: CategoryTree) -> None:
        assert tree.display_path(999) == ""


class TestTreeHelpers:
    """Tests for the remaining lookups."""

    def test_has_children(self, tree: CategoryTree) -> None:
        assert tree.has_children(2)
        assert not tree.has_children(4)

    def test_is_descendant(self, tree: CategoryTree) -> None:
        assert tree.is_descendant(4, 1)
        assert tree.is_descendant(1, 1)
        assert not tree.is_descendant(7, 1)

    def test_next_sort_order(self, tree: CategoryTree) -> None:
        assert tree.next_sort_order(2) == 2
        assert tree.next_sort_order(4) == 0
        assert tree.next_sort_order(None) == 2
