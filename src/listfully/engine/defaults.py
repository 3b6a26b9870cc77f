"""Built-in workflows used to initialise a new owner's config document."""

from __future__ import annotations

from .models import Status, StatusGroup, StatusKind, UserSettings

DEFAULT_GROUP_ID = "default"
SIMPLE_GROUP_ID = "simple"


def default_statuses() -> tuple[Status, ...]:
    """The four-step materials workflow."""
    return (
        Status(id="listed", name="Listed", icon=StatusKind.SQUARE, color="#6b7280"),
        Status(id="ordered", name="Ordered", icon=StatusKind.TRUCK, color="#2563eb"),
        Status(id="received", name="Received", icon=StatusKind.CHECK_SQUARE, color="#16a34a"),
        Status(id="returned", name="Returned", icon=StatusKind.ARROW_UTURN_LEFT, color="#dc2626"),
    )


def default_status_groups() -> tuple[StatusGroup, ...]:
    """A minimal two-status workflow and the four-status materials workflow."""
    return (
        StatusGroup(
            id=SIMPLE_GROUP_ID,
            name="To Do",
            statuses=(
                Status(id="todo", name="To do", icon=StatusKind.SQUARE, color="#6b7280"),
                Status(id="done", name="Done", icon=StatusKind.CHECK_SQUARE, color="#16a34a"),
            ),
        ),
        StatusGroup(
            id=DEFAULT_GROUP_ID,
            name="Materials",
            statuses=default_statuses(),
        ),
    )


def default_settings() -> UserSettings:
    return UserSettings(status_groups=default_status_groups())
