from __future__ import annotations

from pathlib import Path

import pytest

from metis.config import get_settings
from metis.core.tracker import Tracker
from metis.db.storage import MemoryKeyValueStore, StorageAdapter


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'metis.db'}")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
    monkeypatch.setenv("TIMEZONE", "UTC")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def storage(store: MemoryKeyValueStore) -> StorageAdapter:
    return StorageAdapter(store)


@pytest.fixture
def tracker(storage: StorageAdapter) -> Tracker:
    return Tracker(storage)
