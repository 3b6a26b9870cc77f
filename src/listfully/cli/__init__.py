"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from listfully.config import ListfullyConfig, load_config
from listfully.engine.errors import ListfullyError, ValidationFailure
from listfully.engine.models import Item, ShoppingList, StatusGroup
from listfully.sync.session import Session
from listfully.sync.store import JsonDirectoryStore, StoreError

console = Console()

T = TypeVar("T")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


def open_session(config: ListfullyConfig | None = None) -> Session:
    """Open a session on the configured data directory."""
    config = config or load_config()
    store = JsonDirectoryStore(config.resolved_data_dir())
    return Session.open(
        store,
        config.owner_id,
        order_delta=config.order_key_delta,
        hover_threshold=config.hover_threshold,
        default_sort_mode=config.default_sort_mode,
    )


def print_notices(session: Session) -> None:
    for notice in session.drain_notices():
        console.print(f"[yellow]Warning:[/yellow] {notice}")


def run_or_exit(fn: Callable[[], T]) -> T:
    try:
        return fn()
    except (ListfullyError, StoreError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def find_item(shopping_list: ShoppingList, ref: str) -> Item:
    """Resolve an item by id, 1-based position, or unambiguous name."""
    index = shopping_list.find_item(ref)
    if index >= 0:
        return shopping_list.items[index]
    if ref.isdigit():
        position = int(ref)
        if 1 <= position <= len(shopping_list.items):
            return shopping_list.items[position - 1]
        raise ValidationFailure(f"No item at position {position} in {shopping_list.name!r}")
    matches = [item for item in shopping_list.items if item.name.casefold() == ref.casefold()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise ValidationFailure(f"More than one item is named {ref!r}; use its id or position")
    raise ValidationFailure(f"Unknown item {ref!r} in {shopping_list.name!r}")


def find_workflow(session: Session, ref: str) -> StatusGroup:
    """Resolve a workflow by id or unambiguous name."""
    group = session.settings.get_group(ref)
    if group is not None:
        return group
    matches = [g for g in session.settings.status_groups if g.name.casefold() == ref.casefold()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise ValidationFailure(f"More than one workflow is named {ref!r}; use its id")
    raise ValidationFailure(f"Unknown workflow {ref!r}")


__all__ = [
    "configure_logging",
    "console",
    "find_item",
    "find_workflow",
    "open_session",
    "print_notices",
    "run_or_exit",
]
