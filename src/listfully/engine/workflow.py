"""Status workflows: cyclic transitions, workflow changes, and editing.

A workflow (status group) is an ordered, non-empty tuple of statuses.
Cycling advances an item to the next status and wraps at the end. Items
reference statuses by id only, so every lookup here tolerates ids that no
longer resolve and recovers through a defined fallback.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .defaults import default_settings
from .errors import StaleReference, ValidationFailure
from .ids import generate_id
from .models import (
    DEFAULT_STATUS_COLOR,
    ShoppingList,
    Status,
    StatusGroup,
    StatusKind,
    UserSettings,
)

logger = logging.getLogger(__name__)


def require_name(name: str, what: str) -> str:
    """Return ``name`` stripped; blank names are a validation failure."""
    stripped = (name or "").strip()
    if not stripped:
        raise ValidationFailure(f"{what} name must not be empty")
    return stripped


# ---------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------


def next_status(workflow: StatusGroup, current_status_id: str) -> str:
    """Return the status id that follows ``current_status_id``.

    Wraps from the last status to the first. An unknown id is treated as
    index -1, so a stale reference advances to the first status.
    """
    index = workflow.index_of(current_status_id)
    if index < 0:
        logger.warning(
            "Status %r not found in workflow %r; restarting at first status",
            current_status_id,
            workflow.id,
        )
    return workflow.statuses[(index + 1) % len(workflow.statuses)].id


def resolve_workflow(settings: UserSettings, status_group_id: str) -> StatusGroup:
    """Resolve a list's workflow, falling back to the owner's first one."""
    group = settings.get_group(status_group_id)
    if group is not None:
        return group
    if not settings.status_groups:
        raise StaleReference("status group", status_group_id)
    fallback = settings.status_groups[0]
    logger.warning(
        "Status group %r not found; falling back to %r",
        status_group_id,
        fallback.id,
    )
    return fallback


def change_workflow(shopping_list: ShoppingList, new_workflow: StatusGroup) -> ShoppingList:
    """Switch a list to ``new_workflow`` and reset every item's status.

    Destructive: no item keeps a status from the previous workflow. Callers
    must obtain confirmation before invoking this.
    """
    first = new_workflow.first_status.id
    return replace(
        shopping_list,
        status_group_id=new_workflow.id,
        items=tuple(replace(item, status=first) for item in shopping_list.items),
    )


def reset_stale_statuses(shopping_list: ShoppingList, workflow: StatusGroup) -> ShoppingList:
    """Move items whose status no longer resolves to the workflow's first status."""
    first = workflow.first_status.id
    changed = False
    items = []
    for item in shopping_list.items:
        if workflow.index_of(item.status) < 0:
            items.append(replace(item, status=first))
            changed = True
        else:
            items.append(item)
    if not changed:
        return shopping_list
    return replace(shopping_list, items=tuple(items))


# ---------------------------------------------------------------------
# Editing a single workflow
# ---------------------------------------------------------------------


def add_status(
    workflow: StatusGroup,
    name: str,
    *,
    icon: StatusKind = StatusKind.SQUARE,
    color: str = DEFAULT_STATUS_COLOR,
) -> StatusGroup:
    status = Status(
        id=generate_id(),
        name=require_name(name, "Status"),
        icon=icon,
        color=color,
    )
    return replace(workflow, statuses=workflow.statuses + (status,))


def delete_status(workflow: StatusGroup, status_id: str) -> StatusGroup:
    """Remove a status. A workflow must keep at least one status."""
    if workflow.index_of(status_id) < 0:
        raise ValidationFailure(f"Status {status_id!r} is not part of workflow {workflow.name!r}")
    if len(workflow.statuses) == 1:
        raise ValidationFailure(f"Cannot delete the last status of workflow {workflow.name!r}")
    return replace(
        workflow,
        statuses=tuple(s for s in workflow.statuses if s.id != status_id),
    )


def update_status(
    workflow: StatusGroup,
    status_id: str,
    *,
    name: str | None = None,
    icon: StatusKind | None = None,
    color: str | None = None,
) -> StatusGroup:
    index = workflow.index_of(status_id)
    if index < 0:
        raise ValidationFailure(f"Status {status_id!r} is not part of workflow {workflow.name!r}")
    status = workflow.statuses[index]
    if name is not None:
        status = replace(status, name=require_name(name, "Status"))
    if icon is not None:
        status = replace(status, icon=icon)
    if color is not None:
        status = replace(status, color=color)
    statuses = list(workflow.statuses)
    statuses[index] = status
    return replace(workflow, statuses=tuple(statuses))


def move_status(workflow: StatusGroup, status_id: str, to_index: int) -> StatusGroup:
    """Move a status to ``to_index``, changing cycle order and sort priority."""
    index = workflow.index_of(status_id)
    if index < 0:
        raise ValidationFailure(f"Status {status_id!r} is not part of workflow {workflow.name!r}")
    if not 0 <= to_index < len(workflow.statuses):
        raise ValidationFailure(f"Status position {to_index} is out of range")
    if index == to_index:
        return workflow
    statuses = list(workflow.statuses)
    moved = statuses.pop(index)
    statuses.insert(to_index, moved)
    return replace(workflow, statuses=tuple(statuses))


# ---------------------------------------------------------------------
# Editing the set of workflows
# ---------------------------------------------------------------------


def add_workflow(
    settings: UserSettings,
    name: str,
    statuses: tuple[Status, ...] | None = None,
) -> tuple[UserSettings, StatusGroup]:
    """Append a new workflow. Without statuses it starts with a single "To do"."""
    if statuses is not None and not statuses:
        raise ValidationFailure("A workflow needs at least one status")
    group = StatusGroup(
        id=generate_id(),
        name=require_name(name, "Workflow"),
        statuses=statuses or (Status(id=generate_id(), name="To do"),),
    )
    return replace(settings, status_groups=settings.status_groups + (group,)), group


def replace_workflow(settings: UserSettings, group: StatusGroup) -> UserSettings:
    if settings.get_group(group.id) is None:
        raise ValidationFailure(f"Unknown workflow {group.id!r}")
    if not group.statuses:
        raise ValidationFailure("A workflow needs at least one status")
    return replace(
        settings,
        status_groups=tuple(group if g.id == group.id else g for g in settings.status_groups),
    )


def rename_workflow(settings: UserSettings, group_id: str, name: str) -> UserSettings:
    group = settings.get_group(group_id)
    if group is None:
        raise ValidationFailure(f"Unknown workflow {group_id!r}")
    return replace_workflow(settings, replace(group, name=require_name(name, "Workflow")))


def delete_workflow(settings: UserSettings, group_id: str) -> UserSettings:
    """Remove a workflow. An owner must keep at least one workflow."""
    if settings.get_group(group_id) is None:
        raise ValidationFailure(f"Unknown workflow {group_id!r}")
    if len(settings.status_groups) == 1:
        raise ValidationFailure("Cannot delete the last workflow")
    return replace(
        settings,
        status_groups=tuple(g for g in settings.status_groups if g.id != group_id),
    )


def reset_workflows() -> UserSettings:
    """Return the built-in workflows, discarding every customisation."""
    return default_settings()
