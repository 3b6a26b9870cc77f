"""Read model: what a list's items look like on screen.

The displayed sequence is derived from canonical state and the active sort
mode. One extra slot, ``transitional``, holds a frozen order that wins over
the derived order for exactly one render. It exists for status changes made
while the view is sorted by status: re-deriving immediately would move the
item the user just touched, so the pre-change order is frozen instead and
becomes the new custom order.
"""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass, replace
from typing import Iterable

from .models import Item, ShoppingList, SortMode, StatusGroup
from .workflow import next_status

logger = logging.getLogger(__name__)


def _name_key(item: Item) -> tuple[str, str]:
    return locale.strxfrm(item.name.casefold()), item.name


def _status_rank(workflow: StatusGroup, item: Item) -> int:
    index = workflow.index_of(item.status)
    # Unresolved statuses sort after every known one.
    return index if index >= 0 else len(workflow.statuses)


def sort_items(items: Iterable[Item], mode: SortMode, workflow: StatusGroup) -> list[Item]:
    """Return ``items`` in display order for ``mode``.

    ``custom`` keeps canonical order. Name modes compare case-insensitively
    using the current locale's collation. ``status`` is a stable sort by the
    workflow position of each item's status, ties broken by name ascending.
    """
    items = list(items)
    if mode is SortMode.CUSTOM:
        return items
    if mode is SortMode.NAME_ASC:
        return sorted(items, key=_name_key)
    if mode is SortMode.NAME_DESC:
        return sorted(items, key=_name_key, reverse=True)
    if mode is SortMode.STATUS:
        return sorted(items, key=lambda item: (_status_rank(workflow, item), _name_key(item)))
    raise ValueError(f"Unknown sort mode: {mode}")


def completion(items: Iterable[Item], workflow: StatusGroup) -> tuple[int, int]:
    """Return ``(completed, total)``; completed items sit in the last status."""
    items = list(items)
    last = workflow.last_status.id
    return sum(1 for item in items if item.status == last), len(items)


@dataclass
class ListView:
    """Session-local view state for one list.

    ``transitional`` takes precedence over the derived order and is cleared
    by the render that consumes it, or by any later change to the list's
    items. Snapshots never touch this object.
    """

    list_id: str
    sort_mode: SortMode = SortMode.CUSTOM
    transitional: tuple[Item, ...] | None = None

    @property
    def allows_reorder(self) -> bool:
        return self.sort_mode is SortMode.CUSTOM

    def set_sort_mode(self, mode: SortMode) -> None:
        self.sort_mode = mode
        self.transitional = None

    def render(self, shopping_list: ShoppingList, workflow: StatusGroup) -> list[Item]:
        if self.transitional is not None:
            frozen = list(self.transitional)
            self.transitional = None
            return frozen
        return sort_items(shopping_list.items, self.sort_mode, workflow)


def cycle_item_status(
    view: ListView,
    shopping_list: ShoppingList,
    item_id: str,
    workflow: StatusGroup,
) -> ShoppingList:
    """Advance one item's status and return the new canonical list.

    Outside of status sort this is an in-place change. Under status sort the
    currently displayed order is frozen with the change applied, stored as
    the view's transitional override, committed as the canonical custom
    order, and the view switches to ``custom``.
    """
    index = shopping_list.find_item(item_id)
    if index < 0:
        raise KeyError(item_id)
    target = shopping_list.items[index]
    advanced = replace(target, status=next_status(workflow, target.status))

    if view.sort_mode is not SortMode.STATUS:
        items = list(shopping_list.items)
        items[index] = advanced
        return replace(shopping_list, items=tuple(items))

    frozen = tuple(
        advanced if item.id == item_id else item
        for item in sort_items(shopping_list.items, SortMode.STATUS, workflow)
    )
    logger.debug("Freezing status-sorted order of list %s after cycling %s", shopping_list.id, item_id)
    view.transitional = frozen
    view.sort_mode = SortMode.CUSTOM
    return replace(shopping_list, items=frozen)
