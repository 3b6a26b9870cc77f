"""Shared fixtures for the list engine, sync layer, and CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from listfully.engine.defaults import default_settings, default_statuses
from listfully.engine.models import StatusGroup
from listfully.sync.session import Session
from listfully.sync.store import JsonDirectoryStore, MemoryStore

OWNER = "owner-1"


@pytest.fixture
def materials() -> StatusGroup:
    """The built-in Listed -> Ordered -> Received -> Returned workflow."""
    return StatusGroup(id="default", name="Materials", statuses=default_statuses())


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def json_store(tmp_path: Path) -> JsonDirectoryStore:
    return JsonDirectoryStore(tmp_path / "data")


@pytest.fixture
def session(memory_store: MemoryStore) -> Session:
    memory_store.put_settings(OWNER, default_settings())
    return Session.open(memory_store, OWNER)


@pytest.fixture
def listfully_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and data at a temporary home directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("LISTFULLY_HOME", str(home))
    return home
