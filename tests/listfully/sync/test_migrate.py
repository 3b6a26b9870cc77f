"""Tests for merging guest lists into an owner's store."""

from __future__ import annotations

from listfully.engine.models import Item, ShoppingList
from listfully.sync.migrate import discard_guest_lists, merge_guest_lists
from listfully.sync.store import MemoryStore

GUEST = "guest"
OWNER = "owner-1"


def _make_guest_list(list_id: str, order_key: float) -> ShoppingList:
    return ShoppingList(
        id=list_id,
        owner_id=GUEST,
        name=f"Guest {list_id}",
        status_group_id="default",
        order_key=order_key,
        items=(Item(id=f"{list_id}-i1", name="Tap", status="listed"),),
    )


def test_merge_rewrites_owner_and_ids() -> None:
    guest_store = MemoryStore()
    guest_store.put_list(_make_guest_list("G1", 0))
    guest_store.put_list(_make_guest_list("G2", 1000))
    store = MemoryStore()

    merged = merge_guest_lists(guest_store, GUEST, store, OWNER)

    assert [lst.name for lst in merged] == ["Guest G1", "Guest G2"]
    assert all(lst.owner_id == OWNER for lst in merged)
    assert {lst.id for lst in merged}.isdisjoint({"G1", "G2"})
    assert sorted(store.load_lists(OWNER), key=lambda lst: lst.order_key) == merged
    assert merged[0].items[0].id == "G1-i1"


def test_merge_clears_guest_lists() -> None:
    guest_store = MemoryStore()
    guest_store.put_list(_make_guest_list("G1", 0))

    merge_guest_lists(guest_store, GUEST, MemoryStore(), OWNER)

    assert guest_store.load_lists(GUEST) == []


def test_merge_defaults_missing_fields() -> None:
    guest_store = MemoryStore()
    guest_store._write_list_payload(GUEST, "G1", {"id": "G1", "name": "Bare"})
    store = MemoryStore()

    merged = merge_guest_lists(guest_store, GUEST, store, OWNER)

    assert merged[0].items == ()
    assert merged[0].status_group_id == "default"


def test_merge_into_same_store() -> None:
    store = MemoryStore()
    store.put_list(_make_guest_list("G1", 0))

    merge_guest_lists(store, GUEST, store, OWNER)

    assert store.load_lists(GUEST) == []
    assert len(store.load_lists(OWNER)) == 1


def test_discard() -> None:
    guest_store = MemoryStore()
    guest_store.put_list(_make_guest_list("G1", 0))
    guest_store.put_list(_make_guest_list("G2", 1))

    assert discard_guest_lists(guest_store, GUEST) == 2
    assert guest_store.load_lists(GUEST) == []
