"""List engine: domain models, status workflows, ordering and projection.

Public API surface -- the sync layer and the CLI import from this package.
"""

from .defaults import (
    DEFAULT_GROUP_ID,
    SIMPLE_GROUP_ID,
    default_settings,
    default_status_groups,
    default_statuses,
)
from .errors import (
    ListfullyError,
    ReorderExhausted,
    StaleReference,
    SyncFailure,
    ValidationFailure,
)
from .export import render_export
from .ids import generate_id
from .models import (
    DEFAULT_STATUS_COLOR,
    Item,
    ShoppingList,
    SortMode,
    Status,
    StatusGroup,
    StatusKind,
    UserSettings,
)
from .ordering import (
    DEFAULT_ORDER_DELTA,
    allocate_order_key,
    head_order_key,
    plan_head_insert,
    plan_list_move,
    renormalize,
    sort_lists,
)
from .positioning import (
    HOVER_THRESHOLD,
    DropIndicator,
    DropSide,
    hover_indicator,
    move_to_gap,
    resolve_drop_index,
)
from .projector import ListView, completion, cycle_item_status, sort_items
from .workflow import (
    change_workflow,
    next_status,
    reset_stale_statuses,
    resolve_workflow,
)

__all__ = [
    "DEFAULT_GROUP_ID",
    "DEFAULT_ORDER_DELTA",
    "DEFAULT_STATUS_COLOR",
    "DropIndicator",
    "DropSide",
    "HOVER_THRESHOLD",
    "Item",
    "ListView",
    "ListfullyError",
    "ReorderExhausted",
    "SIMPLE_GROUP_ID",
    "ShoppingList",
    "SortMode",
    "StaleReference",
    "Status",
    "StatusGroup",
    "StatusKind",
    "SyncFailure",
    "UserSettings",
    "ValidationFailure",
    "allocate_order_key",
    "change_workflow",
    "completion",
    "cycle_item_status",
    "default_settings",
    "default_status_groups",
    "default_statuses",
    "generate_id",
    "head_order_key",
    "hover_indicator",
    "move_to_gap",
    "next_status",
    "plan_head_insert",
    "plan_list_move",
    "render_export",
    "renormalize",
    "reset_stale_statuses",
    "resolve_drop_index",
    "resolve_workflow",
    "sort_items",
    "sort_lists",
]
