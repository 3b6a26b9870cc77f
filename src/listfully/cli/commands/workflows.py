"""Workflow (status group) commands.

Commands:
    workflows show        -- Show workflows and their statuses
    workflows add         -- Create a workflow
    workflows rm          -- Delete a workflow
    workflows add-status  -- Append a status to a workflow
    workflows rm-status   -- Delete a status from a workflow
    workflows reset       -- Restore the built-in workflows
"""

from __future__ import annotations

import typer
from rich.table import Table

from listfully.cli import console, find_workflow, open_session, print_notices, run_or_exit
from listfully.engine.errors import ValidationFailure
from listfully.engine.models import DEFAULT_STATUS_COLOR, StatusGroup, StatusKind

app = typer.Typer(help="Manage status workflows")


def _find_status_id(group: StatusGroup, ref: str) -> str:
    if group.get(ref) is not None:
        return ref
    matches = [s for s in group.statuses if s.name.casefold() == ref.casefold()]
    if len(matches) == 1:
        return matches[0].id
    raise ValidationFailure(f"Unknown status {ref!r} in workflow {group.name!r}")


@app.command("show")
def show_command() -> None:
    """Show every workflow in cycle order."""

    def _run() -> None:
        session = open_session()
        for group in session.settings.status_groups:
            table = Table(title=f"{group.name} ({group.id})")
            table.add_column("#", justify="right", style="dim")
            table.add_column("Status", style="bold")
            table.add_column("Icon", style="magenta")
            table.add_column("Color")
            table.add_column("ID", style="cyan")
            for position, status in enumerate(group.statuses, start=1):
                table.add_row(
                    str(position),
                    status.name,
                    status.icon.value,
                    f"[{status.color}]{status.color}[/]",
                    status.id,
                )
            console.print(table)

    run_or_exit(_run)


@app.command("add")
def add_command(name: str = typer.Argument(..., help="Workflow name")) -> None:
    """Create a workflow with a single starting status."""

    def _run() -> None:
        session = open_session()
        group = session.add_workflow(name)
        print_notices(session)
        console.print(f"[green]Created[/green] workflow {group.name} ({group.id})")

    run_or_exit(_run)


@app.command("rm")
def remove_command(
    workflow: str = typer.Argument(..., help="Workflow id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a workflow. Lists using it move to the first remaining one."""

    def _run() -> None:
        session = open_session()
        group = find_workflow(session, workflow)
        affected = [lst for lst in session.ordered_lists() if lst.status_group_id == group.id]
        if affected and not yes:
            typer.confirm(
                f"{len(affected)} list(s) use '{group.name}' and will have their statuses reset. Continue?",
                abort=True,
            )
        session.delete_workflow(group.id)
        print_notices(session)
        console.print(f"[green]Deleted[/green] workflow {group.name}")

    run_or_exit(_run)


@app.command("add-status")
def add_status_command(
    workflow: str = typer.Argument(..., help="Workflow id or name"),
    name: str = typer.Argument(..., help="Status name"),
    icon: StatusKind = typer.Option(StatusKind.SQUARE, "--icon", help="Icon kind"),
    color: str = typer.Option(DEFAULT_STATUS_COLOR, "--color", help="Display color"),
) -> None:
    """Append a status to the end of a workflow."""

    def _run() -> None:
        session = open_session()
        group = find_workflow(session, workflow)
        status = session.add_status(group.id, name, icon=icon, color=color)
        print_notices(session)
        console.print(f"[green]Added[/green] status {status.name} to {group.name}")

    run_or_exit(_run)


@app.command("rm-status")
def remove_status_command(
    workflow: str = typer.Argument(..., help="Workflow id or name"),
    status: str = typer.Argument(..., help="Status id or name"),
) -> None:
    """Delete a status. Items in it restart at the workflow's first status."""

    def _run() -> None:
        session = open_session()
        group = find_workflow(session, workflow)
        session.delete_status(group.id, _find_status_id(group, status))
        print_notices(session)
        console.print(f"[green]Deleted[/green] status {status} from {group.name}")

    run_or_exit(_run)


@app.command("reset")
def reset_command(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")) -> None:
    """Restore the built-in workflows, discarding every customisation."""

    def _run() -> None:
        if not yes:
            typer.confirm("Discard all workflow customisations?", abort=True)
        session = open_session()
        settings = session.reset_workflows(confirmed=True)
        print_notices(session)
        names = ", ".join(group.name for group in settings.status_groups)
        console.print(f"[green]Workflows reset:[/green] {names}")

    run_or_exit(_run)
