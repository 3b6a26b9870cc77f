"""Document stores behind the sync boundary.

A store holds one document per list, one config document per owner, and a
per-owner item-name history. Every write bumps the owner's revision; a
:class:`Subscription` watches that revision and delivers a full
:class:`Snapshot` whenever it moves.

Two implementations share the document handling in :class:`DocumentStore`:
:class:`MemoryStore` keeps everything in process, :class:`JsonDirectoryStore`
writes JSON files atomically under a data directory.
"""

from __future__ import annotations

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from listfully.engine.defaults import default_settings
from listfully.engine.models import ShoppingList, UserSettings

from .documents import ConfigDocument, ListDocument, migrate_config_payload

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


class StoreError(Exception):
    """Raised when the store encounters corruption or I/O errors."""


@dataclass(frozen=True)
class Snapshot:
    """Authoritative state of one owner at a given revision."""

    owner_id: str
    revision: int
    lists: tuple[ShoppingList, ...]
    settings: UserSettings


class DocumentStore(ABC):
    """Shared document handling on top of raw payload primitives."""

    # -----------------------------------------------------------------
    # Raw primitives
    # -----------------------------------------------------------------

    @abstractmethod
    def revision(self, owner_id: str) -> int:
        """Monotonic counter bumped on every write for ``owner_id``."""

    @abstractmethod
    def _read_list_payloads(self, owner_id: str) -> list[dict[str, Any]]: ...

    @abstractmethod
    def _write_list_payload(self, owner_id: str, list_id: str, payload: dict[str, Any]) -> None: ...

    @abstractmethod
    def _remove_list_payload(self, owner_id: str, list_id: str) -> None: ...

    @abstractmethod
    def _read_config_payload(self, owner_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    def _write_config_payload(self, owner_id: str, payload: dict[str, Any]) -> None: ...

    @abstractmethod
    def _read_history(self, owner_id: str) -> list[str]: ...

    @abstractmethod
    def _write_history(self, owner_id: str, names: list[str]) -> None: ...

    # -----------------------------------------------------------------
    # Documents
    # -----------------------------------------------------------------

    def load_lists(self, owner_id: str) -> list[ShoppingList]:
        lists = []
        for payload in self._read_list_payloads(owner_id):
            try:
                document = ListDocument.model_validate(payload)
            except ValidationError as exc:
                raise StoreError(f"Invalid list document for owner {owner_id}: {exc}") from exc
            shopping_list = document.to_model()
            if not shopping_list.owner_id:
                shopping_list = replace(shopping_list, owner_id=owner_id)
            lists.append(shopping_list)
        return lists

    def load_settings(self, owner_id: str) -> UserSettings:
        """Read the config document, initialising or migrating it on first access."""
        payload = self._read_config_payload(owner_id)
        if payload is None:
            logger.info("No config for owner %s; writing built-in workflows", owner_id)
            settings = default_settings()
            self.put_settings(owner_id, settings)
            return settings

        payload, migrated = migrate_config_payload(payload)
        try:
            settings = ConfigDocument.model_validate(payload).to_model()
        except ValidationError as exc:
            raise StoreError(f"Invalid config document for owner {owner_id}: {exc}") from exc

        if not settings.status_groups:
            logger.warning("Config for owner %s has no workflows; restoring defaults", owner_id)
            settings = default_settings()
            self.put_settings(owner_id, settings)
        elif migrated:
            logger.info("Migrated legacy status config for owner %s", owner_id)
            self.put_settings(owner_id, settings)
        return settings

    def load(self, owner_id: str) -> Snapshot:
        lists = self.load_lists(owner_id)
        settings = self.load_settings(owner_id)
        return Snapshot(
            owner_id=owner_id,
            revision=self.revision(owner_id),
            lists=tuple(lists),
            settings=settings,
        )

    def put_list(self, shopping_list: ShoppingList) -> None:
        payload = ListDocument.from_model(shopping_list).dump()
        self._write_list_payload(shopping_list.owner_id, shopping_list.id, payload)

    def delete_list(self, owner_id: str, list_id: str) -> None:
        self._remove_list_payload(owner_id, list_id)

    def put_settings(self, owner_id: str, settings: UserSettings) -> None:
        self._write_config_payload(owner_id, ConfigDocument.from_model(settings).dump())

    # -----------------------------------------------------------------
    # Item history
    # -----------------------------------------------------------------

    def load_history(self, owner_id: str) -> list[str]:
        return list(self._read_history(owner_id))

    def add_history(self, owner_id: str, name: str) -> None:
        """Record ``name`` (lower-cased) in the owner's history; set semantics."""
        normalized = name.strip().lower()
        if not normalized:
            return
        names = self._read_history(owner_id)
        if normalized not in names:
            self._write_history(owner_id, names + [normalized])

    def remove_history(self, owner_id: str, name: str) -> None:
        normalized = name.strip().lower()
        names = self._read_history(owner_id)
        if normalized in names:
            self._write_history(owner_id, [n for n in names if n != normalized])

    # -----------------------------------------------------------------
    # Subscription
    # -----------------------------------------------------------------

    def subscribe(self, owner_id: str, *, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Subscription:
        return Subscription(self, owner_id, poll_interval=poll_interval)


class Subscription:
    """Cancelable, restartable, lazy stream of snapshots for one owner.

    Iterating blocks until the store's revision moves, then yields the full
    snapshot. The stream is infinite until :meth:`cancel` is called;
    :meth:`restart` resumes it and redelivers the current state.
    """

    def __init__(
        self,
        store: DocumentStore,
        owner_id: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.owner_id = owner_id
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._last_revision: int | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def poll(self) -> Snapshot | None:
        """Return a snapshot if the store changed since the last delivery."""
        if self._cancelled:
            return None
        if self._last_revision is not None and self.store.revision(self.owner_id) == self._last_revision:
            return None
        snapshot = self.store.load(self.owner_id)
        self._last_revision = snapshot.revision
        return snapshot

    def cancel(self) -> None:
        self._cancelled = True

    def restart(self) -> None:
        self._cancelled = False
        self._last_revision = None

    def __iter__(self) -> Subscription:
        return self

    def __next__(self) -> Snapshot:
        while not self._cancelled:
            snapshot = self.poll()
            if snapshot is not None:
                return snapshot
            self._sleep(self.poll_interval)
        raise StopIteration


class MemoryStore(DocumentStore):
    """In-process store. Used for guest sessions and in tests."""

    def __init__(self) -> None:
        self._lists: dict[str, dict[str, dict[str, Any]]] = {}
        self._configs: dict[str, dict[str, Any]] = {}
        self._history: dict[str, list[str]] = {}
        self._revisions: dict[str, int] = {}

    def _bump(self, owner_id: str) -> None:
        self._revisions[owner_id] = self._revisions.get(owner_id, 0) + 1

    def revision(self, owner_id: str) -> int:
        return self._revisions.get(owner_id, 0)

    def _read_list_payloads(self, owner_id: str) -> list[dict[str, Any]]:
        return [json.loads(json.dumps(p)) for p in self._lists.get(owner_id, {}).values()]

    def _write_list_payload(self, owner_id: str, list_id: str, payload: dict[str, Any]) -> None:
        self._lists.setdefault(owner_id, {})[list_id] = json.loads(json.dumps(payload))
        self._bump(owner_id)

    def _remove_list_payload(self, owner_id: str, list_id: str) -> None:
        self._lists.get(owner_id, {}).pop(list_id, None)
        self._bump(owner_id)

    def _read_config_payload(self, owner_id: str) -> dict[str, Any] | None:
        payload = self._configs.get(owner_id)
        return json.loads(json.dumps(payload)) if payload is not None else None

    def _write_config_payload(self, owner_id: str, payload: dict[str, Any]) -> None:
        self._configs[owner_id] = json.loads(json.dumps(payload))
        self._bump(owner_id)

    def _read_history(self, owner_id: str) -> list[str]:
        return list(self._history.get(owner_id, []))

    def _write_history(self, owner_id: str, names: list[str]) -> None:
        self._history[owner_id] = list(names)

    def owners(self) -> list[str]:
        return sorted(set(self._lists) | set(self._configs))


class JsonDirectoryStore(DocumentStore):
    """File-backed store.

    Layout under ``root``::

        <owner>/lists/<list-id>.json
        <owner>/config.json
        <owner>/history.json
        <owner>/revision
    """

    LISTS_DIRNAME = "lists"
    CONFIG_FILENAME = "config.json"
    HISTORY_FILENAME = "history.json"
    REVISION_FILENAME = "revision"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _owner_dir(self, owner_id: str) -> Path:
        return self.root / owner_id

    def _read_json(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in {path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Cannot read {path}: {exc}") from exc

    def _write_json(self, path: Path, payload: Any) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            os.replace(str(tmp_path), str(path))
        except OSError as exc:
            raise StoreError(f"Cannot write {path}: {exc}") from exc

    def _bump(self, owner_id: str) -> None:
        path = self._owner_dir(owner_id) / self.REVISION_FILENAME
        self._write_json(path, self.revision(owner_id) + 1)

    def revision(self, owner_id: str) -> int:
        path = self._owner_dir(owner_id) / self.REVISION_FILENAME
        if not path.exists():
            return 0
        value = self._read_json(path)
        if not isinstance(value, int):
            raise StoreError(f"Invalid revision marker in {path}")
        return value

    def _read_list_payloads(self, owner_id: str) -> list[dict[str, Any]]:
        lists_dir = self._owner_dir(owner_id) / self.LISTS_DIRNAME
        if not lists_dir.is_dir():
            return []
        payloads = []
        for path in sorted(lists_dir.glob("*.json")):
            payload = self._read_json(path)
            if not isinstance(payload, dict):
                raise StoreError(f"Expected a JSON object in {path}")
            payloads.append(payload)
        return payloads

    def _write_list_payload(self, owner_id: str, list_id: str, payload: dict[str, Any]) -> None:
        self._write_json(self._owner_dir(owner_id) / self.LISTS_DIRNAME / f"{list_id}.json", payload)
        self._bump(owner_id)

    def _remove_list_payload(self, owner_id: str, list_id: str) -> None:
        path = self._owner_dir(owner_id) / self.LISTS_DIRNAME / f"{list_id}.json"
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot delete {path}: {exc}") from exc
        self._bump(owner_id)

    def _read_config_payload(self, owner_id: str) -> dict[str, Any] | None:
        path = self._owner_dir(owner_id) / self.CONFIG_FILENAME
        if not path.exists():
            return None
        payload = self._read_json(path)
        if not isinstance(payload, dict):
            raise StoreError(f"Expected a JSON object in {path}")
        return payload

    def _write_config_payload(self, owner_id: str, payload: dict[str, Any]) -> None:
        self._write_json(self._owner_dir(owner_id) / self.CONFIG_FILENAME, payload)
        self._bump(owner_id)

    def _read_history(self, owner_id: str) -> list[str]:
        path = self._owner_dir(owner_id) / self.HISTORY_FILENAME
        if not path.exists():
            return []
        payload = self._read_json(path)
        items = payload.get("items", []) if isinstance(payload, dict) else []
        return [str(name) for name in items]

    def _write_history(self, owner_id: str, names: list[str]) -> None:
        self._write_json(self._owner_dir(owner_id) / self.HISTORY_FILENAME, {"items": names})
