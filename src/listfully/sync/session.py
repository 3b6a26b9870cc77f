"""Editing session for one owner.

The session is the single entry point for every mutation. It holds:

- ``lists`` / ``settings``: canonical state, either the last snapshot or
  an optimistic local write that has not been re-observed yet;
- ``views``: per-list view state, including the one-render transitional
  override;
- ``drag``: the item drag in progress, if any;
- ``pending``: outbound mutations that are unacknowledged or failed.

Mutation flow (do not reorder):
    1. validate input (raise ValidationFailure, nothing changes)
    2. compute the new canonical fragment with the engine
    3. apply it locally (optimistic)
    4. send it to the store; a failure is recorded, never rolled back

Snapshots replace ``lists`` and ``settings`` wholesale. ``views`` and
``drag`` are session-local and survive every snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable

from listfully.engine.errors import SyncFailure, ValidationFailure
from listfully.engine.ids import generate_id
from listfully.engine.models import (
    DEFAULT_STATUS_COLOR,
    Item,
    ShoppingList,
    SortMode,
    Status,
    StatusGroup,
    StatusKind,
    UserSettings,
)
from listfully.engine.ordering import DEFAULT_ORDER_DELTA, plan_head_insert, plan_list_move, sort_lists
from listfully.engine.positioning import HOVER_THRESHOLD, DropIndicator, hover_indicator, move_to_gap
from listfully.engine.projector import ListView, completion, cycle_item_status
from listfully.engine import workflow as wf
from listfully.engine.workflow import require_name

from .history import ItemHistory
from .store import DocumentStore, Snapshot, StoreError, Subscription

logger = logging.getLogger(__name__)


def _now_utc() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _require_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailure(f"Quantity must be a positive integer, got {quantity!r}")
    return quantity


@dataclass
class PendingMutation:
    """An outbound store call that has not been acknowledged."""

    mutation_id: str
    operation: str
    target_id: str
    created_at: str
    send: Callable[[], None] = field(repr=False, compare=False)
    error: str | None = None


@dataclass
class ItemDrag:
    """An item drag in progress inside one list."""

    list_id: str
    item_id: str
    indicator: DropIndicator | None = None


class Session:
    def __init__(
        self,
        store: DocumentStore,
        owner_id: str,
        *,
        order_delta: float = DEFAULT_ORDER_DELTA,
        descending: bool = False,
        hover_threshold: float = HOVER_THRESHOLD,
        default_sort_mode: SortMode = SortMode.CUSTOM,
    ) -> None:
        self.store = store
        self.owner_id = owner_id
        self.order_delta = order_delta
        self.descending = descending
        self.hover_threshold = hover_threshold
        self.default_sort_mode = default_sort_mode

        self.lists: dict[str, ShoppingList] = {}
        self.settings = UserSettings()
        self.revision = -1
        self.views: dict[str, ListView] = {}
        self.drag: ItemDrag | None = None
        self.pending: list[PendingMutation] = []
        self.notices: list[str] = []
        self.history = ItemHistory(store, owner_id)

    @classmethod
    def open(cls, store: DocumentStore, owner_id: str, **kwargs) -> Session:
        """Create a session primed with the store's current snapshot."""
        session = cls(store, owner_id, **kwargs)
        session.apply_snapshot(store.load(owner_id))
        return session

    # -----------------------------------------------------------------
    # Reconciliation
    # -----------------------------------------------------------------

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Replace canonical state with ``snapshot``. Views and drag are kept."""
        if snapshot.owner_id != self.owner_id:
            raise ValueError(
                f"Snapshot for owner {snapshot.owner_id!r} delivered to session of {self.owner_id!r}"
            )
        self.lists = {lst.id: lst for lst in snapshot.lists}
        self.settings = snapshot.settings
        self.revision = snapshot.revision
        logger.debug(
            "Applied snapshot r%d for %s (%d lists)",
            snapshot.revision,
            self.owner_id,
            len(self.lists),
        )

    def sync(self, subscription: Subscription) -> bool:
        """Pull one snapshot from ``subscription``; True if one was applied."""
        snapshot = subscription.poll()
        if snapshot is None:
            return False
        self.apply_snapshot(snapshot)
        return True

    def _send(self, operation: str, target_id: str, send: Callable[[], None]) -> bool:
        mutation = PendingMutation(
            mutation_id=generate_id(),
            operation=operation,
            target_id=target_id,
            created_at=_now_utc(),
            send=send,
        )
        self.pending.append(mutation)
        return self._deliver(mutation)

    def _deliver(self, mutation: PendingMutation) -> bool:
        try:
            mutation.send()
        except StoreError as exc:
            failure = SyncFailure(mutation.operation, mutation.target_id, str(exc))
            mutation.error = failure.reason
            logger.warning("%s; local change kept", failure)
            self.notices.append(str(failure))
            return False
        self.pending.remove(mutation)
        return True

    def retry_failed(self) -> int:
        """Re-send every failed mutation with current state; returns how many succeeded."""
        succeeded = 0
        for mutation in [m for m in self.pending if m.error is not None]:
            mutation.error = None
            if self._deliver(mutation):
                succeeded += 1
        return succeeded

    def drain_notices(self) -> list[str]:
        notices, self.notices = self.notices, []
        return notices

    def _put_list(self, list_id: str) -> Callable[[], None]:
        def send() -> None:
            shopping_list = self.lists.get(list_id)
            if shopping_list is not None:
                self.store.put_list(shopping_list)

        return send

    def _commit_list(self, shopping_list: ShoppingList, operation: str) -> ShoppingList:
        self.lists[shopping_list.id] = shopping_list
        view = self.views.get(shopping_list.id)
        # A frozen order is only valid while it matches the canonical items.
        if view is not None and view.transitional is not None and view.transitional != shopping_list.items:
            view.transitional = None
        self._send(operation, shopping_list.id, self._put_list(shopping_list.id))
        return shopping_list

    def _commit_settings(self, settings: UserSettings, operation: str) -> None:
        self.settings = settings
        self._send(operation, self.owner_id, lambda: self.store.put_settings(self.owner_id, self.settings))

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def ordered_lists(self) -> list[ShoppingList]:
        return sort_lists(self.lists.values(), descending=self.descending)

    def get_list(self, list_id: str) -> ShoppingList:
        shopping_list = self.lists.get(list_id)
        if shopping_list is None:
            raise ValidationFailure(f"Unknown list {list_id!r}")
        return shopping_list

    def find_list(self, ref: str) -> ShoppingList:
        """Look a list up by id, or by case-insensitive name when unambiguous."""
        if ref in self.lists:
            return self.lists[ref]
        matches = [lst for lst in self.lists.values() if lst.name.casefold() == ref.casefold()]
        if len(matches) == 1:
            return matches[0]
        if matches:
            raise ValidationFailure(f"More than one list is named {ref!r}; use its id")
        raise ValidationFailure(f"Unknown list {ref!r}")

    def workflow_for(self, list_id: str) -> StatusGroup:
        return wf.resolve_workflow(self.settings, self.get_list(list_id).status_group_id)

    def get_workflow(self, group_id: str) -> StatusGroup:
        group = self.settings.get_group(group_id)
        if group is None:
            raise ValidationFailure(f"Unknown workflow {group_id!r}")
        return group

    def view(self, list_id: str) -> ListView:
        if list_id not in self.views:
            self.views[list_id] = ListView(list_id, sort_mode=self.default_sort_mode)
        return self.views[list_id]

    def render(self, list_id: str) -> list[Item]:
        """Items in display order. Consumes a pending transitional override."""
        shopping_list = self.get_list(list_id)
        return self.view(list_id).render(shopping_list, self.workflow_for(list_id))

    def completion(self, list_id: str) -> tuple[int, int]:
        return completion(self.get_list(list_id).items, self.workflow_for(list_id))

    # -----------------------------------------------------------------
    # Lists
    # -----------------------------------------------------------------

    def create_list(self, name: str, status_group_id: str | None = None) -> ShoppingList:
        name = require_name(name, "List")
        if not self.settings.status_groups:
            raise ValidationFailure("No workflows available")
        if status_group_id is None:
            group = self.settings.status_groups[0]
        else:
            group = self.get_workflow(status_group_id)
        order_key, renumbered = plan_head_insert(
            self.lists.values(), delta=self.order_delta, descending=self.descending
        )
        for existing in renumbered:
            self._commit_list(existing, "reorder list")
        shopping_list = ShoppingList(
            id=generate_id(),
            owner_id=self.owner_id,
            name=name,
            status_group_id=group.id,
            order_key=order_key,
        )
        return self._commit_list(shopping_list, "create list")

    def rename_list(self, list_id: str, name: str) -> ShoppingList:
        name = require_name(name, "List")
        shopping_list = self.get_list(list_id)
        if shopping_list.name == name:
            return shopping_list
        return self._commit_list(replace(shopping_list, name=name), "rename list")

    def delete_list(self, list_id: str) -> None:
        self.get_list(list_id)
        del self.lists[list_id]
        self.views.pop(list_id, None)
        if self.drag is not None and self.drag.list_id == list_id:
            self.drag = None
        self._send("delete list", list_id, lambda: self.store.delete_list(self.owner_id, list_id))

    def move_list(self, list_id: str, to_index: int) -> list[ShoppingList]:
        """Move a list to display position ``to_index``; returns the lists rewritten."""
        self.get_list(list_id)
        changed = plan_list_move(
            self.lists.values(),
            list_id,
            to_index,
            delta=self.order_delta,
            descending=self.descending,
        )
        for shopping_list in changed:
            self._commit_list(shopping_list, "reorder list")
        return changed

    # -----------------------------------------------------------------
    # Items
    # -----------------------------------------------------------------

    def _item_index(self, shopping_list: ShoppingList, item_id: str) -> int:
        index = shopping_list.find_item(item_id)
        if index < 0:
            raise ValidationFailure(f"Unknown item {item_id!r} in list {shopping_list.name!r}")
        return index

    def _replace_item(self, list_id: str, item_id: str, operation: str, **changes) -> Item:
        shopping_list = self.get_list(list_id)
        index = self._item_index(shopping_list, item_id)
        current = shopping_list.items[index]
        updated = replace(current, **changes)
        if updated == current:
            return current
        items = list(shopping_list.items)
        items[index] = updated
        self._commit_list(replace(shopping_list, items=tuple(items)), operation)
        return updated

    def add_item(self, list_id: str, name: str, quantity: int = 1) -> Item:
        """Add an item at the top of the list, in the workflow's first status."""
        name = require_name(name, "Item")
        quantity = _require_quantity(quantity)
        shopping_list = self.get_list(list_id)
        item = Item(
            id=generate_id(),
            name=name,
            quantity=quantity,
            status=self.workflow_for(list_id).first_status.id,
        )
        self._commit_list(replace(shopping_list, items=(item,) + shopping_list.items), "add item")
        try:
            self.history.record(name)
        except SyncFailure as failure:
            logger.warning("%s", failure)
            self.notices.append(str(failure))
        return item

    def rename_item(self, list_id: str, item_id: str, name: str) -> Item:
        return self._replace_item(list_id, item_id, "rename item", name=require_name(name, "Item"))

    def set_quantity(self, list_id: str, item_id: str, quantity: int) -> Item:
        return self._replace_item(list_id, item_id, "set quantity", quantity=_require_quantity(quantity))

    def delete_item(self, list_id: str, item_id: str) -> None:
        shopping_list = self.get_list(list_id)
        self._item_index(shopping_list, item_id)
        items = tuple(item for item in shopping_list.items if item.id != item_id)
        self._commit_list(replace(shopping_list, items=items), "delete item")

    def cycle_status(self, list_id: str, item_id: str) -> Item:
        """Advance an item to its workflow's next status.

        Under status sort this freezes the displayed order; see
        :func:`listfully.engine.projector.cycle_item_status`.
        """
        shopping_list = self.get_list(list_id)
        self._item_index(shopping_list, item_id)
        updated = cycle_item_status(
            self.view(list_id),
            shopping_list,
            item_id,
            self.workflow_for(list_id),
        )
        self._commit_list(updated, "cycle status")
        return updated.items[updated.find_item(item_id)]

    def set_sort_mode(self, list_id: str, mode: SortMode) -> None:
        self.get_list(list_id)
        self.view(list_id).set_sort_mode(mode)

    # -----------------------------------------------------------------
    # Item drag and drop
    # -----------------------------------------------------------------

    def _require_custom_order(self, list_id: str) -> None:
        view = self.view(list_id)
        if not view.allows_reorder:
            raise ValidationFailure(
                f"Items can only be reordered in custom sort mode (current: {view.sort_mode})"
            )

    def begin_drag(self, list_id: str, item_id: str) -> ItemDrag:
        shopping_list = self.get_list(list_id)
        self._item_index(shopping_list, item_id)
        self._require_custom_order(list_id)
        self.drag = ItemDrag(list_id=list_id, item_id=item_id)
        return self.drag

    def hover(self, hovered_index: int, pointer_offset: float, extent: float) -> DropIndicator | None:
        """Update the drop indicator for the drag in progress."""
        if self.drag is None:
            return None
        self.drag.indicator = hover_indicator(
            hovered_index,
            pointer_offset,
            extent,
            self.drag.indicator,
            threshold=self.hover_threshold,
        )
        return self.drag.indicator

    def end_drag(self, *, commit: bool = True) -> bool:
        """Finish the drag. Returns True if the item moved."""
        drag, self.drag = self.drag, None
        if drag is None or not commit or drag.indicator is None:
            return False
        shopping_list = self.lists.get(drag.list_id)
        if shopping_list is None:
            logger.info("List %s vanished during drag; drop discarded", drag.list_id)
            return False
        from_index = shopping_list.find_item(drag.item_id)
        if from_index < 0:
            logger.info("Item %s vanished during drag; drop discarded", drag.item_id)
            return False
        return self.move_item(drag.list_id, from_index, drag.indicator.gap)

    def move_item(self, list_id: str, from_index: int, gap: int) -> bool:
        """Move the item at ``from_index`` into ``gap``. Returns True if it moved."""
        shopping_list = self.get_list(list_id)
        self._require_custom_order(list_id)
        reordered = move_to_gap(shopping_list.items, from_index, gap)
        if reordered is None:
            return False
        self._commit_list(replace(shopping_list, items=reordered), "reorder item")
        return True

    # -----------------------------------------------------------------
    # Workflows
    # -----------------------------------------------------------------

    def _lists_using(self, group_id: str) -> list[ShoppingList]:
        return [lst for lst in self.ordered_lists() if lst.status_group_id == group_id]

    def change_workflow(self, list_id: str, status_group_id: str, *, confirmed: bool = False) -> ShoppingList:
        """Switch a list's workflow. Resets every item's status, so needs ``confirmed``."""
        if not confirmed:
            raise ValidationFailure("Changing a list's workflow resets every item's status; confirmation required")
        shopping_list = self.get_list(list_id)
        group = self.get_workflow(status_group_id)
        self.view(list_id).transitional = None
        return self._commit_list(wf.change_workflow(shopping_list, group), "change workflow")

    def add_workflow(self, name: str) -> StatusGroup:
        settings, group = wf.add_workflow(self.settings, name)
        self._commit_settings(settings, "add workflow")
        return group

    def rename_workflow(self, group_id: str, name: str) -> StatusGroup:
        self._commit_settings(wf.rename_workflow(self.settings, group_id, name), "rename workflow")
        return self.get_workflow(group_id)

    def delete_workflow(self, group_id: str) -> None:
        """Delete a workflow and move the lists that used it to the first remaining one."""
        settings = wf.delete_workflow(self.settings, group_id)
        affected = self._lists_using(group_id)
        self._commit_settings(settings, "delete workflow")
        fallback = settings.status_groups[0]
        for shopping_list in affected:
            self._commit_list(wf.change_workflow(shopping_list, fallback), "change workflow")

    def _update_group(self, group: StatusGroup, operation: str) -> StatusGroup:
        self._commit_settings(wf.replace_workflow(self.settings, group), operation)
        return group

    def add_status(
        self,
        group_id: str,
        name: str,
        *,
        icon: StatusKind = StatusKind.SQUARE,
        color: str = DEFAULT_STATUS_COLOR,
    ) -> Status:
        group = wf.add_status(self.get_workflow(group_id), name, icon=icon, color=color)
        self._update_group(group, "add status")
        return group.last_status

    def update_status(
        self,
        group_id: str,
        status_id: str,
        *,
        name: str | None = None,
        icon: StatusKind | None = None,
        color: str | None = None,
    ) -> Status:
        group = wf.update_status(self.get_workflow(group_id), status_id, name=name, icon=icon, color=color)
        self._update_group(group, "update status")
        return group.statuses[group.index_of(status_id)]

    def move_status(self, group_id: str, status_id: str, to_index: int) -> StatusGroup:
        group = wf.move_status(self.get_workflow(group_id), status_id, to_index)
        return self._update_group(group, "reorder status")

    def delete_status(self, group_id: str, status_id: str) -> StatusGroup:
        """Delete a status; items that were in it restart at the first status."""
        group = wf.delete_status(self.get_workflow(group_id), status_id)
        self._update_group(group, "delete status")
        for shopping_list in self._lists_using(group_id):
            repaired = wf.reset_stale_statuses(shopping_list, group)
            if repaired is not shopping_list:
                self._commit_list(repaired, "reset status")
        return group

    def reset_workflows(self, *, confirmed: bool = False) -> UserSettings:
        """Restore the built-in workflows and repair every list against them."""
        if not confirmed:
            raise ValidationFailure("Resetting workflows discards every customisation; confirmation required")
        settings = wf.reset_workflows()
        self._commit_settings(settings, "reset workflows")
        fallback = settings.status_groups[0]
        for shopping_list in self.ordered_lists():
            group = settings.get_group(shopping_list.status_group_id)
            if group is None:
                repaired = wf.change_workflow(shopping_list, fallback)
            else:
                repaired = wf.reset_stale_statuses(shopping_list, group)
            if repaired is not shopping_list:
                self._commit_list(repaired, "reset status")
        return settings
