"""``listfully export`` command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from listfully.cli import console, open_session, run_or_exit
from listfully.engine.export import render_export


def export(
    list_ref: str = typer.Argument(..., help="List id or name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
) -> None:
    """Print a list grouped by status, ready to share."""

    def _run() -> None:
        session = open_session()
        shopping_list = session.find_list(list_ref)
        text = render_export(shopping_list, session.workflow_for(shopping_list.id))
        if output is None:
            typer.echo(text, nl=False)
            return
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]Exported[/green] {shopping_list.name} to {output}")

    run_or_exit(_run)
