"""Item-name history commands."""

from __future__ import annotations

import typer

from listfully.cli import console, open_session, run_or_exit

app = typer.Typer(help="Browse and prune remembered item names")


@app.command("show")
def show_command(term: str = typer.Argument("", help="Only names containing this text")) -> None:
    """Show remembered item names."""

    def _run() -> None:
        names = open_session().history.search(term)
        if not names:
            console.print("[dim]No matching history.[/dim]")
            return
        for name in names:
            console.print(name)

    run_or_exit(_run)


@app.command("rm")
def remove_command(name: str = typer.Argument(..., help="Name to forget")) -> None:
    """Forget an item name."""

    def _run() -> None:
        open_session().history.remove(name)
        console.print(f"[green]Forgot[/green] {name.strip().lower()}")

    run_or_exit(_run)
