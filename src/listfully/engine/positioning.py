"""Explicit-position reordering for items inside a list.

Items have no order key: their index in the owning list *is* their custom
order. A drag runs in two phases:

1. Hover: the pointer's relative position over the hovered item picks a
   drop indicator. The top band means "insert before", the bottom band
   "insert after", and the middle band keeps whatever indicator was set
   before so the indicator does not flicker.
2. Drop: the dragged item is removed and re-inserted at the indicator's gap,
   shifted down by one when that gap lay after the removed position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Sequence, TypeVar

from .errors import ValidationFailure

logger = logging.getLogger(__name__)

HOVER_THRESHOLD = 0.35

T = TypeVar("T")


class DropSide(StrEnum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class DropIndicator:
    """Where a dragged item would land, relative to the hovered item."""

    index: int
    side: DropSide

    @property
    def gap(self) -> int:
        """Gap index in the pre-drop sequence (0 = before the first item)."""
        return self.index if self.side is DropSide.BEFORE else self.index + 1


def hover_indicator(
    hovered_index: int,
    pointer_offset: float,
    extent: float,
    previous: DropIndicator | None,
    *,
    threshold: float = HOVER_THRESHOLD,
) -> DropIndicator | None:
    """Compute the drop indicator for a pointer over ``hovered_index``.

    ``pointer_offset`` is measured from the top of the hovered item and
    ``extent`` is the item's height. Both band edges are inclusive; strictly
    inside the middle band the previous indicator is returned unchanged.
    """
    if extent <= 0:
        return previous
    ratio = pointer_offset / extent
    if ratio <= threshold:
        return DropIndicator(hovered_index, DropSide.BEFORE)
    if ratio >= 1 - threshold:
        return DropIndicator(hovered_index, DropSide.AFTER)
    return previous


def resolve_drop_index(from_index: int, gap: int) -> int | None:
    """Final index of the dragged item, or ``None`` when the drop is a no-op.

    Dropping into the gap directly before or after the item's own position
    leaves the sequence unchanged.
    """
    if gap in (from_index, from_index + 1):
        return None
    return gap - 1 if gap > from_index else gap


def move_to_gap(sequence: Sequence[T], from_index: int, gap: int) -> tuple[T, ...] | None:
    """Return ``sequence`` with the element at ``from_index`` moved into ``gap``.

    The result is always a permutation of the input. Returns ``None`` for a
    no-op drop.
    """
    if not 0 <= from_index < len(sequence):
        raise ValidationFailure(f"Item position {from_index} is out of range")
    if not 0 <= gap <= len(sequence):
        raise ValidationFailure(f"Drop position {gap} is out of range")
    target = resolve_drop_index(from_index, gap)
    if target is None:
        logger.debug("Drop at gap %d is adjacent to index %d; discarded", gap, from_index)
        return None
    reordered = list(sequence)
    moved = reordered.pop(from_index)
    reordered.insert(target, moved)
    return tuple(reordered)
