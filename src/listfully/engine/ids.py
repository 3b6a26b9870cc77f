"""Identifier generation for lists, items, statuses, and workflows."""

from __future__ import annotations

from ulid import ULID


def generate_id() -> str:
    """Return a new lexicographically sortable ULID string."""
    return str(ULID())
