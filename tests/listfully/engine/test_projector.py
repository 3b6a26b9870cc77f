"""Tests for item sort modes, completion, and the transitional freeze."""

from __future__ import annotations

import pytest

from listfully.engine.models import Item, ShoppingList, SortMode, StatusGroup
from listfully.engine.projector import (
    ListView,
    completion,
    cycle_item_status,
    sort_items,
)


def _make_item(item_id: str, name: str, status: str = "listed") -> Item:
    return Item(id=item_id, name=name, status=status)


def _make_list(*items: Item) -> ShoppingList:
    return ShoppingList(
        id="L1",
        owner_id="owner-1",
        name="Kitchen",
        status_group_id="default",
        items=items,
    )


def _ids(items) -> list[str]:
    return [item.id for item in items]


class TestSortItems:
    def test_custom_keeps_canonical_order(self, materials: StatusGroup) -> None:
        items = [_make_item("1", "b"), _make_item("2", "a")]
        assert _ids(sort_items(items, SortMode.CUSTOM, materials)) == ["1", "2"]

    def test_name_ascending_ignores_case(self, materials: StatusGroup) -> None:
        items = [_make_item("1", "banana"), _make_item("2", "Apple"), _make_item("3", "cherry")]
        assert _ids(sort_items(items, SortMode.NAME_ASC, materials)) == ["2", "1", "3"]

    def test_name_descending(self, materials: StatusGroup) -> None:
        items = [_make_item("1", "banana"), _make_item("2", "Apple"), _make_item("3", "cherry")]
        assert _ids(sort_items(items, SortMode.NAME_DESC, materials)) == ["3", "1", "2"]

    def test_status_follows_workflow_index(self, materials: StatusGroup) -> None:
        items = [
            _make_item("1", "a", "returned"),
            _make_item("2", "b", "listed"),
            _make_item("3", "c", "received"),
            _make_item("4", "d", "ordered"),
        ]
        assert _ids(sort_items(items, SortMode.STATUS, materials)) == ["2", "4", "3", "1"]

    def test_status_ties_broken_by_name(self, materials: StatusGroup) -> None:
        items = [
            _make_item("1", "Zinc", "ordered"),
            _make_item("2", "bolts", "ordered"),
            _make_item("3", "Anchor", "ordered"),
        ]
        assert _ids(sort_items(items, SortMode.STATUS, materials)) == ["3", "2", "1"]

    def test_status_sort_is_stable(self, materials: StatusGroup) -> None:
        items = [_make_item("1", "same", "listed"), _make_item("2", "same", "listed")]
        assert _ids(sort_items(items, SortMode.STATUS, materials)) == ["1", "2"]
        assert _ids(sort_items(reversed(items), SortMode.STATUS, materials)) == ["2", "1"]

    def test_unknown_status_sorts_last(self, materials: StatusGroup) -> None:
        items = [_make_item("1", "a", "gone"), _make_item("2", "b", "returned")]
        assert _ids(sort_items(items, SortMode.STATUS, materials)) == ["2", "1"]

    def test_sorting_never_changes_membership(self, materials: StatusGroup) -> None:
        items = [_make_item(str(n), f"item {n % 3}", s.id) for n, s in enumerate(materials.statuses * 2)]
        for mode in SortMode:
            assert sorted(_ids(sort_items(items, mode, materials))) == sorted(_ids(items))


class TestCompletion:
    def test_counts_items_in_last_status(self, materials: StatusGroup) -> None:
        items = [
            _make_item("1", "a", "returned"),
            _make_item("2", "b", "received"),
            _make_item("3", "c", "returned"),
        ]
        assert completion(items, materials) == (2, 3)

    def test_empty(self, materials: StatusGroup) -> None:
        assert completion([], materials) == (0, 0)


class TestListView:
    def test_only_custom_allows_reorder(self) -> None:
        view = ListView("L1")
        assert view.allows_reorder
        view.set_sort_mode(SortMode.NAME_ASC)
        assert not view.allows_reorder

    def test_render_derives_from_sort_mode(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(_make_item("1", "b"), _make_item("2", "a"))
        view = ListView("L1", sort_mode=SortMode.NAME_ASC)
        assert _ids(view.render(shopping_list, materials)) == ["2", "1"]

    def test_transitional_wins_for_one_render(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(_make_item("1", "a"), _make_item("2", "b"))
        view = ListView("L1", transitional=(shopping_list.items[1], shopping_list.items[0]))

        assert _ids(view.render(shopping_list, materials)) == ["2", "1"]
        assert view.transitional is None
        assert _ids(view.render(shopping_list, materials)) == ["1", "2"]

    def test_choosing_a_sort_mode_clears_transitional(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(_make_item("1", "b"), _make_item("2", "a"))
        view = ListView("L1", transitional=shopping_list.items)
        view.set_sort_mode(SortMode.NAME_ASC)
        assert _ids(view.render(shopping_list, materials)) == ["2", "1"]


class TestCycleItemStatus:
    def test_in_place_outside_status_sort(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(_make_item("1", "b"), _make_item("2", "a"))
        view = ListView("L1", sort_mode=SortMode.NAME_ASC)

        updated = cycle_item_status(view, shopping_list, "1", materials)

        assert _ids(updated.items) == ["1", "2"]
        assert updated.items[0].status == "ordered"
        assert view.sort_mode is SortMode.NAME_ASC
        assert view.transitional is None

    def test_listed_cycles_to_ordered_and_back_after_four(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(_make_item("1", "a"))
        view = ListView("L1")

        shopping_list = cycle_item_status(view, shopping_list, "1", materials)
        assert shopping_list.items[0].status == "ordered"
        for _ in range(3):
            shopping_list = cycle_item_status(view, shopping_list, "1", materials)
        assert shopping_list.items[0].status == "listed"

    def test_freeze_under_status_sort(self, materials: StatusGroup) -> None:
        # Once both are "ordered", name order would put item 2 first.
        shopping_list = _make_list(
            _make_item("1", "Zinc", "listed"),
            _make_item("2", "Anchor", "ordered"),
        )
        view = ListView("L1", sort_mode=SortMode.STATUS)
        assert _ids(view.render(shopping_list, materials)) == ["1", "2"]

        updated = cycle_item_status(view, shopping_list, "1", materials)

        assert view.sort_mode is SortMode.CUSTOM
        assert _ids(updated.items) == ["1", "2"]
        assert [i.status for i in updated.items] == ["ordered", "ordered"]
        assert _ids(view.render(updated, materials)) == ["1", "2"]
        assert view.transitional is None
        assert _ids(view.render(updated, materials)) == ["1", "2"]

    def test_freeze_commits_sorted_order_as_custom(self, materials: StatusGroup) -> None:
        shopping_list = _make_list(
            _make_item("1", "a", "returned"),
            _make_item("2", "b", "listed"),
        )
        view = ListView("L1", sort_mode=SortMode.STATUS)

        updated = cycle_item_status(view, shopping_list, "2", materials)

        assert _ids(updated.items) == ["2", "1"]

    def test_unknown_item(self, materials: StatusGroup) -> None:
        with pytest.raises(KeyError):
            cycle_item_status(ListView("L1"), _make_list(), "nope", materials)
