from __future__ import annotations

import logging
from pathlib import Path

from metis.config import Settings, get_settings
from metis.db import models  # noqa: F401
from metis.db.base import Base
from metis.db.session import get_engine, sqlite_database_path
from metis.db.storage import MemoryKeyValueStore, SqlKeyValueStore, StorageAdapter

logger = logging.getLogger(__name__)


def ensure_data_directories(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    paths: list[Path] = [settings.data_dir]
    db_path = sqlite_database_path(settings.database_url)
    if db_path is not None:
        paths.append(db_path.parent)
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database(settings: Settings | None = None) -> dict[str, str | list[str]]:
    settings = settings or get_settings()
    ensure_data_directories(settings)
    engine = get_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    return {"database_url": engine.url.render_as_string(hide_password=True), "tables": sorted(Base.metadata.tables)}


def build_storage(settings: Settings | None = None) -> StorageAdapter:
    settings = settings or get_settings()
    backend = settings.storage_backend

    if backend == "memory":
        return StorageAdapter(MemoryKeyValueStore(quota_bytes=settings.storage_quota_bytes))
    if backend == "none":
        logger.warning("No persistent store configured; changes will not be kept")
        return StorageAdapter(None)

    ensure_data_directories(settings)
    return StorageAdapter(SqlKeyValueStore(get_engine(settings.database_url)))
