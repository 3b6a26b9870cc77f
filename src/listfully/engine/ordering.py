"""Order key allocation for the top-level list collection.

Lists carry a sparse numeric ``order_key``; display order is ascending by
key with ties broken by id. Moving a list only rewrites the moved list's
key, computed from its unmoved neighbors:

- both neighbors: the midpoint;
- one neighbor: one ``delta`` past it, toward the open end;
- no neighbors: nothing to do.

When repeated insertions between the same two neighbors exhaust float
precision the allocator raises :class:`ReorderExhausted` instead of
returning a key that would collide, and :func:`plan_list_move` answers with
an evenly spaced renormalization of the whole sequence.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, Sequence

from .errors import ReorderExhausted, ValidationFailure
from .models import ShoppingList

logger = logging.getLogger(__name__)

DEFAULT_ORDER_DELTA = 1000.0


def sort_lists(lists: Iterable[ShoppingList], *, descending: bool = False) -> list[ShoppingList]:
    """Return lists in display order.

    Ascending by ``order_key`` by default; ``descending=True`` shows the
    highest key first, as time-based keys do for newest-first views. The id
    tie-breaker is always ascending so equal keys stay deterministic.
    """
    if descending:
        return sorted(lists, key=lambda lst: (-lst.order_key, lst.id))
    return sorted(lists, key=lambda lst: (lst.order_key, lst.id))


def allocate_order_key(
    prev_key: float | None,
    next_key: float | None,
    *,
    delta: float = DEFAULT_ORDER_DELTA,
    descending: bool = False,
) -> float | None:
    """Compute a key that sorts between ``prev_key`` and ``next_key``.

    ``prev_key`` belongs to the entity displayed just before the moved one,
    ``next_key`` to the one displayed just after. Returns ``None`` when
    there are no neighbors.

    Raises:
        ReorderExhausted: If the new key is not distinguishable from a
            neighbor, or is not a finite number.
    """
    step = -delta if descending else delta

    if prev_key is not None and next_key is not None:
        key = (prev_key + next_key) / 2
    elif prev_key is not None:
        key = prev_key + step
    elif next_key is not None:
        key = next_key - step
    else:
        return None

    if not math.isfinite(key) or key == prev_key or key == next_key:
        raise ReorderExhausted(prev_key, next_key)
    return key


def renormalize(
    ordered: Sequence[ShoppingList],
    *,
    delta: float = DEFAULT_ORDER_DELTA,
    descending: bool = False,
) -> list[ShoppingList]:
    """Reassign evenly spaced keys that preserve the given display order."""
    count = len(ordered)
    result = []
    for index, shopping_list in enumerate(ordered):
        position = (count - index) if descending else (index + 1)
        result.append(replace(shopping_list, order_key=float(position) * delta))
    return result


def plan_list_move(
    lists: Iterable[ShoppingList],
    list_id: str,
    to_index: int,
    *,
    delta: float = DEFAULT_ORDER_DELTA,
    descending: bool = False,
) -> list[ShoppingList]:
    """Plan moving ``list_id`` to display position ``to_index``.

    Returns the lists whose ``order_key`` changed: an empty list for a no-op
    move, the moved list alone in the common case, or every list whose key
    was rewritten by renormalization.
    """
    ordered = sort_lists(lists, descending=descending)
    from_index = next((i for i, lst in enumerate(ordered) if lst.id == list_id), -1)
    if from_index < 0:
        raise ValidationFailure(f"Unknown list {list_id!r}")
    if not 0 <= to_index < len(ordered):
        raise ValidationFailure(f"List position {to_index} is out of range")
    if from_index == to_index:
        logger.debug("List %s dropped at its own position; nothing to do", list_id)
        return []

    reordered = list(ordered)
    moved = reordered.pop(from_index)
    reordered.insert(to_index, moved)

    prev_list = reordered[to_index - 1] if to_index > 0 else None
    next_list = reordered[to_index + 1] if to_index + 1 < len(reordered) else None

    try:
        key = allocate_order_key(
            prev_list.order_key if prev_list else None,
            next_list.order_key if next_list else None,
            delta=delta,
            descending=descending,
        )
    except ReorderExhausted as exc:
        logger.warning("%s; renormalizing %d lists", exc, len(reordered))
        renumbered = renormalize(reordered, delta=delta, descending=descending)
        return [
            new
            for old, new in zip(reordered, renumbered)
            if new.order_key != old.order_key
        ]

    if key is None:
        return []
    return [replace(moved, order_key=key)]


def head_order_key(
    lists: Iterable[ShoppingList],
    *,
    delta: float = DEFAULT_ORDER_DELTA,
    descending: bool = False,
) -> float:
    """Key that places a new list at the head of the display order.

    Raises:
        ReorderExhausted: If the head key is too large to step past.
    """
    ordered = sort_lists(lists, descending=descending)
    if not ordered:
        return 0.0
    key = allocate_order_key(None, ordered[0].order_key, delta=delta, descending=descending)
    return key if key is not None else 0.0


def plan_head_insert(
    lists: Iterable[ShoppingList],
    *,
    delta: float = DEFAULT_ORDER_DELTA,
    descending: bool = False,
) -> tuple[float, list[ShoppingList]]:
    """Plan the key for a new head list.

    Returns ``(key, changed)``. ``changed`` is empty unless the existing keys
    had to be renormalized to make room, in which case it holds every list
    whose key was rewritten.
    """
    ordered = sort_lists(lists, descending=descending)
    try:
        return head_order_key(ordered, delta=delta, descending=descending), []
    except ReorderExhausted as exc:
        logger.warning("%s; renormalizing %d lists", exc, len(ordered))
    renumbered = renormalize(ordered, delta=delta, descending=descending)
    changed = [new for old, new in zip(ordered, renumbered) if new.order_key != old.order_key]
    return head_order_key(renumbered, delta=delta, descending=descending), changed
