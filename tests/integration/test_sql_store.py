from __future__ import annotations

import sqlite3
from pathlib import Path

from metis.config import get_settings
from metis.core.tracker import Tracker, build_tracker
from metis.db.init import build_storage, init_database
from metis.db.session import get_engine
from metis.db.storage import MemoryKeyValueStore, SqlKeyValueStore, StorageAdapter
from metis.types import JobCreate


def test_sql_store_creates_table_on_first_use(tmp_path: Path) -> None:
    db_path = tmp_path / "lazy.db"
    store = SqlKeyValueStore(get_engine(f"sqlite:///{db_path}"))

    assert store.get_item("metis_jobs") is None
    store.set_item("metis_jobs", "[]")
    store.set_item("metis_jobs", '[{"id": "a"}]')
    store.set_item("metis_notes", "[]")

    assert store.get_item("metis_jobs") == '[{"id": "a"}]'
    assert store.keys() == ["metis_jobs", "metis_notes"]

    store.remove_item("metis_notes")
    store.remove_item("metis_notes")
    assert store.keys() == ["metis_jobs"]

    conn = sqlite3.connect(db_path)
    rows = conn.execute("SELECT key FROM storage_entries").fetchall()
    conn.close()
    assert rows == [("metis_jobs",)]


def test_tracker_data_survives_a_new_store(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'persist.db'}"
    first = Tracker(StorageAdapter(SqlKeyValueStore(get_engine(url))))
    job = first.create_job(JobCreate(company="Acme", position="SRE"), initial_notes="via referral")

    second = Tracker(StorageAdapter(SqlKeyValueStore(get_engine(url))))
    assert second.jobs.get_by_id(job.id) == job
    assert [e.title for e in second.timeline.get_by_job_id(job.id)] == ["Application Created", "Initial Notes"]


def test_build_storage_per_backend() -> None:
    settings = get_settings()

    sql = build_storage(settings)
    assert isinstance(sql.store, SqlKeyValueStore)
    assert settings.data_dir.is_dir()

    memory = build_storage(settings.model_copy(update={"storage_backend": "memory", "storage_quota_bytes": 128}))
    assert isinstance(memory.store, MemoryKeyValueStore)
    assert memory.store.quota_bytes == 128

    detached = build_storage(settings.model_copy(update={"storage_backend": "none"}))
    assert detached.available is False


def test_init_database_then_default_tracker(tmp_path: Path) -> None:
    result = init_database()

    assert result["tables"] == ["storage_entries"]
    assert (tmp_path / "metis.db").exists()

    tracker = build_tracker()
    tracker.create_job(JobCreate(company="Acme", position="SRE"))
    assert len(build_tracker().jobs.get_all()) == 1
