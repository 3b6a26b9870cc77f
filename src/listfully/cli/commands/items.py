"""Item commands.

Commands:
    items show            -- Show a list's items in a sort mode
    items add             -- Add an item at the top of a list
    items rm              -- Delete an item
    items edit            -- Rename an item or change its quantity
    items cycle           -- Advance an item to its next status
    items move            -- Drop an item before or after another position
    items reset-workflow  -- Switch a list to another workflow
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table
from rich.text import Text

from listfully.cli import (
    console,
    find_item,
    find_workflow,
    open_session,
    print_notices,
    run_or_exit,
)
from listfully.engine.errors import ValidationFailure
from listfully.engine.models import Item, SortMode, StatusGroup
from listfully.sync.session import Session

app = typer.Typer(help="Manage the items of a list")


def _status_cell(workflow: StatusGroup, item: Item) -> Text:
    status = workflow.get(item.status)
    if status is None:
        return Text(item.status or "-", style="dim")
    return Text(status.name, style=status.color)


def _print_items(session: Session, list_id: str, items: list[Item]) -> None:
    shopping_list = session.get_list(list_id)
    workflow = session.workflow_for(list_id)
    done, total = session.completion(list_id)

    table = Table(title=f"{shopping_list.name} ({done} of {total} completed)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Qty", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Status")
    table.add_column("ID", style="cyan")
    for position, item in enumerate(items, start=1):
        table.add_row(str(position), str(item.quantity), item.name, _status_cell(workflow, item), item.id)
    console.print(table)


@app.command("show")
def show_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    sort: Optional[SortMode] = typer.Option(None, "--sort", "-s", help="Sort mode (default: configured default_sort_mode)"),
) -> None:
    """Show a list's items."""

    def _run() -> None:
        session = open_session()
        list_id = session.find_list(list_ref).id
        if sort is not None:
            session.set_sort_mode(list_id, sort)
        items = session.render(list_id)
        if not items:
            console.print("[dim]No items in this list.[/dim]")
            return
        _print_items(session, list_id, items)

    run_or_exit(_run)


@app.command("add")
def add_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    name: str = typer.Argument(..., help="Item name"),
    quantity: int = typer.Option(1, "--qty", "-q", help="Quantity"),
) -> None:
    """Add an item at the top of a list."""

    def _run() -> None:
        session = open_session()
        item = session.add_item(session.find_list(list_ref).id, name, quantity)
        print_notices(session)
        console.print(f"[green]Added[/green] {item.quantity}x {item.name}")

    run_or_exit(_run)


@app.command("rm")
def remove_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    item_ref: str = typer.Argument(..., help="Item id, position or name"),
) -> None:
    """Delete an item."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        item = find_item(shopping_list, item_ref)
        session.delete_item(shopping_list.id, item.id)
        print_notices(session)
        console.print(f"[green]Deleted[/green] {item.name}")

    run_or_exit(_run)


@app.command("edit")
def edit_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    item_ref: str = typer.Argument(..., help="Item id, position or name"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    quantity: Optional[int] = typer.Option(None, "--qty", "-q", help="New quantity"),
) -> None:
    """Rename an item or change its quantity."""

    def _run() -> None:
        if name is None and quantity is None:
            raise ValidationFailure("Nothing to change; pass --name and/or --qty")
        session = open_session()
        shopping_list = session.find_list(list_ref)
        item = find_item(shopping_list, item_ref)
        if name is not None:
            item = session.rename_item(shopping_list.id, item.id, name)
        if quantity is not None:
            item = session.set_quantity(shopping_list.id, item.id, quantity)
        print_notices(session)
        console.print(f"[green]Updated[/green] {item.quantity}x {item.name}")

    run_or_exit(_run)


@app.command("cycle")
def cycle_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    item_ref: str = typer.Argument(..., help="Item id, position or name"),
    sort: Optional[SortMode] = typer.Option(
        None,
        "--sort",
        "-s",
        help="Sort mode the list is viewed in; cycling under 'status' keeps the shown order",
    ),
) -> None:
    """Advance an item to the next status of its workflow."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        if sort is not None:
            session.set_sort_mode(shopping_list.id, sort)
        displayed = session.render(shopping_list.id)
        if item_ref.isdigit() and shopping_list.find_item(item_ref) < 0:
            position = int(item_ref)
            if not 1 <= position <= len(displayed):
                raise ValidationFailure(f"No item at position {position} in {shopping_list.name!r}")
            item = displayed[position - 1]
        else:
            item = find_item(shopping_list, item_ref)

        updated = session.cycle_status(shopping_list.id, item.id)
        print_notices(session)
        status = session.workflow_for(shopping_list.id).get(updated.status)
        console.print(f"{updated.name} is now [bold]{status.name if status else updated.status}[/bold]")
        _print_items(session, shopping_list.id, session.render(shopping_list.id))

    run_or_exit(_run)


@app.command("move")
def move_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    item_ref: str = typer.Argument(..., help="Item id, position or name"),
    target: int = typer.Argument(..., help="Position of the item to drop next to"),
    after: bool = typer.Option(False, "--after", help="Drop after the target instead of before it"),
) -> None:
    """Move an item before (or after) the item at TARGET."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        item = find_item(shopping_list, item_ref)
        if not 1 <= target <= len(shopping_list.items):
            raise ValidationFailure(f"No item at position {target} in {shopping_list.name!r}")

        # Positions refer to the custom order.
        session.set_sort_mode(shopping_list.id, SortMode.CUSTOM)
        session.begin_drag(shopping_list.id, item.id)
        # Pointer at the very top or bottom edge of the target row.
        session.hover(target - 1, 1.0 if after else 0.0, 1.0)
        moved = session.end_drag()
        print_notices(session)
        if not moved:
            console.print("[dim]Item is already there.[/dim]")
            return
        console.print(f"[green]Moved[/green] {item.name}")
        _print_items(session, shopping_list.id, session.render(shopping_list.id))

    run_or_exit(_run)


@app.command("reset-workflow")
def reset_workflow_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    workflow: str = typer.Argument(..., help="Workflow id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Switch a list to another workflow, resetting every item's status."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        group = find_workflow(session, workflow)
        if not yes:
            typer.confirm(
                f"Every item in '{shopping_list.name}' will restart at '{group.first_status.name}'. Continue?",
                abort=True,
            )
        session.change_workflow(shopping_list.id, group.id, confirmed=True)
        print_notices(session)
        console.print(f"[green]{shopping_list.name}[/green] now uses {group.name}")

    run_or_exit(_run)
