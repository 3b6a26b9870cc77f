"""Tests for the memory and JSON directory document stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from listfully.engine.defaults import default_settings
from listfully.engine.models import Item, ShoppingList
from listfully.sync.store import (
    DocumentStore,
    JsonDirectoryStore,
    MemoryStore,
    StoreError,
    Subscription,
)

OWNER = "owner-1"


def _make_list(list_id: str = "L1", *, order_key: float = 0.0) -> ShoppingList:
    return ShoppingList(
        id=list_id,
        owner_id=OWNER,
        name=f"List {list_id}",
        status_group_id="default",
        order_key=order_key,
        items=(Item(id="i1", name="Tap", status="listed", quantity=2),),
    )


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path: Path) -> DocumentStore:
    if request.param == "memory":
        return MemoryStore()
    return JsonDirectoryStore(tmp_path / "data")


# --- documents (both stores) ---


class TestDocuments:
    def test_put_and_load_list(self, store: DocumentStore) -> None:
        shopping_list = _make_list()
        store.put_list(shopping_list)
        assert store.load_lists(OWNER) == [shopping_list]

    def test_lists_are_per_owner(self, store: DocumentStore) -> None:
        store.put_list(_make_list())
        assert store.load_lists("someone-else") == []

    def test_delete_list(self, store: DocumentStore) -> None:
        store.put_list(_make_list("L1"))
        store.put_list(_make_list("L2"))
        store.delete_list(OWNER, "L1")
        assert [lst.id for lst in store.load_lists(OWNER)] == ["L2"]

    def test_delete_only_list_leaves_empty_collection(self, store: DocumentStore) -> None:
        store.put_list(_make_list())
        store.delete_list(OWNER, "L1")
        assert store.load(OWNER).lists == ()

    def test_settings_initialised_lazily(self, store: DocumentStore) -> None:
        revision = store.revision(OWNER)
        assert store.load_settings(OWNER) == default_settings()
        assert store.revision(OWNER) == revision + 1
        # Second read finds the written document.
        assert store.load_settings(OWNER) == default_settings()
        assert store.revision(OWNER) == revision + 1

    def test_every_write_bumps_revision(self, store: DocumentStore) -> None:
        assert store.revision(OWNER) == 0
        store.put_list(_make_list())
        store.put_settings(OWNER, default_settings())
        store.delete_list(OWNER, "L1")
        assert store.revision(OWNER) == 3

    def test_history_is_a_lowercase_set(self, store: DocumentStore) -> None:
        store.add_history(OWNER, "Tap")
        store.add_history(OWNER, "  tap ")
        store.add_history(OWNER, "Sink")
        assert sorted(store.load_history(OWNER)) == ["sink", "tap"]
        store.remove_history(OWNER, "TAP")
        assert store.load_history(OWNER) == ["sink"]


# --- memory store ---


class TestMemoryStore:
    def test_read_payloads_do_not_alias_storage(self) -> None:
        store = MemoryStore()
        store.put_list(_make_list())
        payloads = store._read_list_payloads(OWNER)
        payloads[0]["name"] = "local edit"
        assert store.load_lists(OWNER)[0].name == "List L1"

    def test_owners(self) -> None:
        store = MemoryStore()
        store.put_list(_make_list())
        store.put_settings("other", default_settings())
        assert store.owners() == [OWNER, "other"]


# --- JSON directory store ---


class TestJsonDirectoryStore:
    def test_layout(self, tmp_path: Path) -> None:
        store = JsonDirectoryStore(tmp_path)
        store.put_list(_make_list())
        store.load_settings(OWNER)
        store.add_history(OWNER, "Tap")

        owner_dir = tmp_path / OWNER
        assert (owner_dir / "lists" / "L1.json").exists()
        assert (owner_dir / "config.json").exists()
        assert json.loads((owner_dir / "history.json").read_text()) == {"items": ["tap"]}
        assert json.loads((owner_dir / "revision").read_text()) == 2

    def test_list_file_uses_store_field_names(self, tmp_path: Path) -> None:
        store = JsonDirectoryStore(tmp_path)
        store.put_list(_make_list())
        payload = json.loads((tmp_path / OWNER / "lists" / "L1.json").read_text())
        assert payload["ownerId"] == OWNER
        assert payload["statusGroupId"] == "default"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        store = JsonDirectoryStore(tmp_path)
        store.put_list(_make_list())
        assert not list(tmp_path.rglob("*.tmp"))

    def test_missing_owner_filled_from_directory(self, tmp_path: Path) -> None:
        lists_dir = tmp_path / OWNER / "lists"
        lists_dir.mkdir(parents=True)
        (lists_dir / "L9.json").write_text(json.dumps({"id": "L9", "name": "Old"}))

        shopping_list = JsonDirectoryStore(tmp_path).load_lists(OWNER)[0]
        assert shopping_list.owner_id == OWNER
        assert shopping_list.items == ()
        assert shopping_list.status_group_id == "default"

    def test_corrupt_json_raises_store_error(self, tmp_path: Path) -> None:
        lists_dir = tmp_path / OWNER / "lists"
        lists_dir.mkdir(parents=True)
        (lists_dir / "bad.json").write_text("{not json")

        with pytest.raises(StoreError, match="Invalid JSON"):
            JsonDirectoryStore(tmp_path).load_lists(OWNER)

    def test_invalid_document_raises_store_error(self, tmp_path: Path) -> None:
        lists_dir = tmp_path / OWNER / "lists"
        lists_dir.mkdir(parents=True)
        (lists_dir / "bad.json").write_text(json.dumps({"name": "no id"}))

        with pytest.raises(StoreError, match="Invalid list document"):
            JsonDirectoryStore(tmp_path).load_lists(OWNER)

    def test_legacy_config_migrated_and_written_back(self, tmp_path: Path) -> None:
        config_path = tmp_path / OWNER / "config.json"
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"statuses": [{"id": "a", "name": "A", "icon": "StarIcon"}]}))

        settings = JsonDirectoryStore(tmp_path).load_settings(OWNER)

        assert settings.status_groups[0].id == "default"
        assert settings.status_groups[0].name == "My Template"
        assert "statusGroups" in json.loads(config_path.read_text())

    def test_config_without_workflows_restored(self, tmp_path: Path) -> None:
        config_path = tmp_path / OWNER / "config.json"
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"statusGroups": []}))

        assert JsonDirectoryStore(tmp_path).load_settings(OWNER) == default_settings()

    def test_unwritable_root_raises_store_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")
        with pytest.raises(StoreError):
            JsonDirectoryStore(blocker).put_list(_make_list())


# --- subscription ---


class TestSubscription:
    def test_first_poll_delivers_current_state(self, memory_store: MemoryStore) -> None:
        memory_store.put_list(_make_list())
        subscription = memory_store.subscribe(OWNER)

        snapshot = subscription.poll()
        assert snapshot is not None
        assert [lst.id for lst in snapshot.lists] == ["L1"]

    def test_poll_returns_none_until_change(self, memory_store: MemoryStore) -> None:
        memory_store.put_settings(OWNER, default_settings())
        subscription = memory_store.subscribe(OWNER)
        subscription.poll()

        assert subscription.poll() is None
        memory_store.put_list(_make_list())
        assert subscription.poll() is not None

    def test_cancel_and_restart(self, memory_store: MemoryStore) -> None:
        memory_store.put_settings(OWNER, default_settings())
        subscription = memory_store.subscribe(OWNER)
        subscription.poll()

        subscription.cancel()
        memory_store.put_list(_make_list())
        assert subscription.cancelled
        assert subscription.poll() is None

        subscription.restart()
        snapshot = subscription.poll()
        assert snapshot is not None
        assert len(snapshot.lists) == 1

    def test_iteration_sleeps_until_change(self, memory_store: MemoryStore) -> None:
        memory_store.put_settings(OWNER, default_settings())
        sleeps: list[float] = []

        def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            memory_store.put_list(_make_list(f"L{len(sleeps)}"))

        subscription = Subscription(memory_store, OWNER, poll_interval=0.25, sleep=fake_sleep)
        first = next(subscription)
        second = next(subscription)

        assert first.lists == ()
        assert len(second.lists) == 1
        assert sleeps == [0.25]

    def test_iteration_stops_when_cancelled(self, memory_store: MemoryStore) -> None:
        subscription = Subscription(memory_store, OWNER, sleep=lambda _: subscription.cancel())
        next(subscription)
        assert list(subscription) == []
