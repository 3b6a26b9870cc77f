"""List management commands.

Commands:
    lists show    -- Show lists in display order
    lists add     -- Create a list at the top
    lists rename  -- Rename a list
    lists rm      -- Delete a list and its items
    lists move    -- Move a list to another position
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from listfully.cli import console, find_workflow, open_session, print_notices, run_or_exit

app = typer.Typer(help="Manage lists")


@app.command("show")
def show_command() -> None:
    """Show every list with its item count and completion."""

    def _run() -> None:
        session = open_session()
        lists = session.ordered_lists()
        if not lists:
            console.print("[dim]No lists yet. Create one with 'listfully lists add NAME'.[/dim]")
            return

        table = Table(title="Lists")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Workflow", style="magenta")
        table.add_column("Completed", justify="right")
        table.add_column("ID", style="cyan")
        for position, shopping_list in enumerate(lists, start=1):
            done, total = session.completion(shopping_list.id)
            table.add_row(
                str(position),
                shopping_list.name,
                session.workflow_for(shopping_list.id).name,
                f"{done} of {total}",
                shopping_list.id,
            )
        console.print(table)

    run_or_exit(_run)


@app.command("add")
def add_command(
    name: str = typer.Argument(..., help="List name"),
    workflow: Optional[str] = typer.Option(None, "--workflow", "-w", help="Workflow id or name"),
) -> None:
    """Create a list at the top of the collection."""

    def _run() -> None:
        session = open_session()
        group_id = find_workflow(session, workflow).id if workflow else None
        shopping_list = session.create_list(name, group_id)
        print_notices(session)
        console.print(f"[green]Created[/green] {shopping_list.name} ({shopping_list.id})")

    run_or_exit(_run)


@app.command("rename")
def rename_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a list."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.rename_list(session.find_list(list_ref).id, name)
        print_notices(session)
        console.print(f"[green]Renamed[/green] to {shopping_list.name}")

    run_or_exit(_run)


@app.command("rm")
def remove_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a list and all of its items."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        if not yes:
            typer.confirm(
                f"Delete '{shopping_list.name}' and its {len(shopping_list.items)} items?",
                abort=True,
            )
        session.delete_list(shopping_list.id)
        print_notices(session)
        console.print(f"[green]Deleted[/green] {shopping_list.name}")

    run_or_exit(_run)


@app.command("move")
def move_command(
    list_ref: str = typer.Argument(..., help="List id or name"),
    position: int = typer.Argument(..., help="Target position (1 = top)"),
) -> None:
    """Move a list to another position."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        changed = session.move_list(shopping_list.id, position - 1)
        print_notices(session)
        if not changed:
            console.print("[dim]Already at that position.[/dim]")
            return
        console.print(f"[green]Moved[/green] {shopping_list.name} to position {position}")

    run_or_exit(_run)
