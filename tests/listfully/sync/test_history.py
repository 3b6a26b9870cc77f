"""Tests for the item-name history."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from listfully.engine.errors import SyncFailure
from listfully.sync.history import ItemHistory
from listfully.sync.store import MemoryStore, StoreError

OWNER = "owner-1"


class TestItemHistory:
    def test_loads_existing_names_sorted(self, memory_store: MemoryStore) -> None:
        memory_store.add_history(OWNER, "tap")
        memory_store.add_history(OWNER, "basin")
        assert ItemHistory(memory_store, OWNER).items == ["basin", "tap"]

    def test_record_lowercases_and_dedupes(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        history.record("Copper Pipe")
        history.record("copper pipe ")
        assert history.items == ["copper pipe"]
        assert memory_store.load_history(OWNER) == ["copper pipe"]

    def test_record_ignores_blank(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        history.record("   ")
        assert history.items == []

    def test_record_failure_raises_sync_failure(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        with patch.object(memory_store, "add_history", side_effect=StoreError("offline")):
            with pytest.raises(SyncFailure, match="offline"):
                history.record("Tap")

    def test_remove(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        history.record("tap")
        history.remove("TAP")
        assert history.items == []
        assert memory_store.load_history(OWNER) == []

    def test_remove_reverted_on_failure(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        history.record("tap")
        history.record("basin")

        with patch.object(memory_store, "remove_history", side_effect=StoreError("offline")):
            with pytest.raises(SyncFailure):
                history.remove("tap")

        assert history.items == ["basin", "tap"]

    def test_remove_unknown_is_noop(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        with patch.object(memory_store, "remove_history") as remove:
            history.remove("never added")
        remove.assert_not_called()

    def test_search(self, memory_store: MemoryStore) -> None:
        history = ItemHistory(memory_store, OWNER)
        for name in ("copper pipe", "pvc pipe", "tap"):
            history.record(name)
        assert history.search("PIPE") == ["copper pipe", "pvc pipe"]
        assert history.search("") == ["copper pipe", "pvc pipe", "tap"]
