"""Domain models for lists, items, and status workflows.

All models are frozen: every mutation produces a new value through
``dataclasses.replace`` so that snapshots handed out by the read model can
never be changed behind a caller's back.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

DEFAULT_STATUS_COLOR = "#333333"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class SortMode(StrEnum):
    """How items inside a list are displayed."""

    CUSTOM = "custom"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    STATUS = "status"


class StatusKind(StrEnum):
    """Known status icon kinds.

    Stored documents carry the icon as a free string; anything that does
    not resolve to a known kind falls back to ``SQUARE``.
    """

    SQUARE = "square"
    CHECK_SQUARE = "check-square"
    CHECK_CIRCLE = "check-circle"
    X_CIRCLE = "x-circle"
    TRUCK = "truck"
    SHOPPING_CART = "shopping-cart"
    PACKAGE = "package"
    BOX = "box"
    ARROW_UTURN_LEFT = "arrow-uturn-left"
    CLIPBOARD_LIST = "clipboard-list"
    STAR = "star"
    FIRE = "fire"
    LIGHT_BULB = "light-bulb"
    TAG = "tag"
    HOME = "home"
    CALENDAR_DAYS = "calendar-days"
    CLOCK = "clock"
    PENCIL = "pencil"
    COG = "cog"

    @classmethod
    def resolve(cls, icon: str | None) -> StatusKind:
        """Resolve a stored icon reference to a kind.

        Accepts canonical values (``"truck"``) as well as component-style
        names (``"TruckIcon"``).
        """
        if not icon:
            return cls.SQUARE
        name = icon.strip()
        if name.endswith("Icon"):
            name = name[: -len("Icon")]
        name = _CAMEL_BOUNDARY.sub("-", name).replace("_", "-").lower()
        try:
            return cls(name)
        except ValueError:
            return cls.SQUARE


@dataclass(frozen=True)
class Status:
    """A single step of a workflow."""

    id: str
    name: str
    icon: StatusKind = StatusKind.SQUARE
    color: str = DEFAULT_STATUS_COLOR


@dataclass(frozen=True)
class StatusGroup:
    """A named, ordered, non-empty sequence of statuses (a workflow).

    Order defines both the cycling sequence and the status-sort priority.
    """

    id: str
    name: str
    statuses: tuple[Status, ...]

    @property
    def first_status(self) -> Status:
        return self.statuses[0]

    @property
    def last_status(self) -> Status:
        return self.statuses[-1]

    def index_of(self, status_id: str) -> int:
        """Return the position of ``status_id``, or -1 when it is unknown."""
        for index, status in enumerate(self.statuses):
            if status.id == status_id:
                return index
        return -1

    def get(self, status_id: str) -> Status | None:
        index = self.index_of(status_id)
        return self.statuses[index] if index >= 0 else None


@dataclass(frozen=True)
class Item:
    """An entry inside a list. Its array position is its custom order."""

    id: str
    name: str
    status: str
    quantity: int = 1


@dataclass(frozen=True)
class ShoppingList:
    """A top-level list owned by a single user."""

    id: str
    owner_id: str
    name: str
    status_group_id: str
    order_key: float = 0.0
    items: tuple[Item, ...] = ()

    def find_item(self, item_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return -1


@dataclass(frozen=True)
class UserSettings:
    """Per-owner configuration document (the available workflows)."""

    status_groups: tuple[StatusGroup, ...] = field(default_factory=tuple)

    def get_group(self, group_id: str) -> StatusGroup | None:
        for group in self.status_groups:
            if group.id == group_id:
                return group
        return None
