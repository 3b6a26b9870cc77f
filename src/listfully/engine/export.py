"""Plain-text rendering of a list, grouped by workflow status."""

from __future__ import annotations

from .models import Item, ShoppingList, StatusGroup

OTHER_HEADING = "Other"


def _heading(name: str) -> str:
    return name[:1].upper() + name[1:]


def _line(item: Item) -> str:
    return f"  - {item.quantity}x {item.name}"


def render_export(shopping_list: ShoppingList, workflow: StatusGroup) -> str:
    """Render ``shopping_list`` as printable text.

    Items are grouped under their status heading in workflow order. Statuses
    without items are omitted; items whose status no longer resolves are
    listed last under "Other".
    """
    title = f"{shopping_list.name}\n{'=' * max(len(shopping_list.name), 20)}\n\n"
    if not shopping_list.items:
        return title + "No items in this list.\n"

    groups: dict[str, list[Item]] = {status.id: [] for status in workflow.statuses}
    other: list[Item] = []
    for item in shopping_list.items:
        if item.status in groups:
            groups[item.status].append(item)
        else:
            other.append(item)

    sections = []
    for status in workflow.statuses:
        items = groups[status.id]
        if items:
            lines = "\n".join(_line(item) for item in items)
            sections.append(f"{_heading(status.name)}:\n{lines}")
    if other:
        lines = "\n".join(_line(item) for item in other)
        sections.append(f"{OTHER_HEADING}:\n{lines}")

    return title + "\n\n".join(sections) + "\n"
