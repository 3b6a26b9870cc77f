"""Sync boundary: document stores, snapshots and the editing session."""

from .documents import ConfigDocument, ListDocument, migrate_config_payload
from .history import ItemHistory
from .migrate import discard_guest_lists, merge_guest_lists
from .session import ItemDrag, PendingMutation, Session
from .store import (
    DocumentStore,
    JsonDirectoryStore,
    MemoryStore,
    Snapshot,
    StoreError,
    Subscription,
)

__all__ = [
    "ConfigDocument",
    "DocumentStore",
    "ItemDrag",
    "ItemHistory",
    "JsonDirectoryStore",
    "ListDocument",
    "MemoryStore",
    "PendingMutation",
    "Session",
    "Snapshot",
    "StoreError",
    "Subscription",
    "discard_guest_lists",
    "merge_guest_lists",
    "migrate_config_payload",
]
