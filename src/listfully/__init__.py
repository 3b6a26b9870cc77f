"""Listfully: shared lists with status workflows and manual ordering."""

from __future__ import annotations

import typer

from listfully.cli import configure_logging
from listfully.cli.commands import config_cmd, history, items, lists, workflows
from listfully.cli.commands.export import export

__version__ = "0.1.0"

app = typer.Typer(
    name="listfully",
    help="Keep lists of things to get, track each item through a status workflow",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"listfully {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    configure_logging(verbose)


app.add_typer(lists.app, name="lists")
app.add_typer(items.app, name="items")
app.add_typer(workflows.app, name="workflows")
app.add_typer(history.app, name="history")
app.add_typer(config_cmd.app, name="config")
app.command("export")(export)


def main() -> None:
    app()


__all__ = ["__version__", "app", "main"]
