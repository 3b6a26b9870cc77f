"""``listfully config`` commands."""

from __future__ import annotations

import typer
from rich.table import Table

from listfully.cli import console, run_or_exit
from listfully.config import config_home, load_config, save_config, update_config

app = typer.Typer(help="Show and change configuration")


@app.command("show")
def show_command() -> None:
    """Show the effective configuration."""

    def _run() -> None:
        config = load_config()
        table = Table(title=f"Configuration ({config_home()})")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="bold")
        for key, value in config.model_dump(mode="json").items():
            table.add_row(key, "" if value is None else str(value))
        table.add_row("data_dir (resolved)", str(config.resolved_data_dir()))
        console.print(table)

    run_or_exit(_run)


@app.command("set")
def set_command(
    key: str = typer.Argument(..., help="Config key"),
    value: str = typer.Argument(..., help="New value (empty string restores the default)"),
) -> None:
    """Set a configuration key."""

    def _run() -> None:
        config = update_config(load_config(), key, value)
        path = save_config(config)
        console.print(f"[green]Saved[/green] {key} to {path}")

    run_or_exit(_run)
