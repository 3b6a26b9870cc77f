"""Per-owner history of item names, used for suggestions.

Removal is optimistic and is the one operation that is rolled back when
the store rejects it: the name is restored to the local view and the
failure is raised to the caller.
"""

from __future__ import annotations

import logging

from listfully.engine.errors import SyncFailure

from .store import DocumentStore, StoreError

logger = logging.getLogger(__name__)


class ItemHistory:
    def __init__(self, store: DocumentStore, owner_id: str) -> None:
        self.store = store
        self.owner_id = owner_id
        self.items: list[str] = sorted(store.load_history(owner_id))

    def record(self, name: str) -> None:
        """Remember ``name``. Store failures are raised as :class:`SyncFailure`."""
        normalized = name.strip().lower()
        if not normalized:
            return
        if normalized not in self.items:
            self.items = sorted(self.items + [normalized])
        try:
            self.store.add_history(self.owner_id, normalized)
        except StoreError as exc:
            raise SyncFailure("record history", normalized, str(exc)) from exc

    def remove(self, name: str) -> None:
        """Forget ``name``; restores it locally if the store rejects the delete."""
        normalized = name.strip().lower()
        if normalized not in self.items:
            return
        self.items = [n for n in self.items if n != normalized]
        try:
            self.store.remove_history(self.owner_id, normalized)
        except StoreError as exc:
            logger.warning("Could not delete %r from history; restoring it", normalized)
            self.items = sorted(self.items + [normalized])
            raise SyncFailure("delete history", normalized, str(exc)) from exc

    def search(self, term: str = "") -> list[str]:
        needle = term.strip().lower()
        if not needle:
            return list(self.items)
        return [name for name in self.items if needle in name]
