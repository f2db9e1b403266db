"""Key-value persistence for the tracker collections.

Each collection lives in one named slot holding a JSON array of records.
``StorageAdapter`` is the only thing repositories talk to: it turns a slot
into a list of dicts and back, and it never lets a storage failure reach the
caller. A failed read looks like an empty collection and a failed write is
dropped after being logged.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from metis.db.base import Base
from metis.db.models import StorageEntry
from metis.db.session import get_session_factory

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised by a store when a slot cannot be read or written."""


class QuotaExceededError(StorageError):
    def __init__(self, key: str, required: int, quota: int):
        super().__init__(f"writing '{key}' needs {required} bytes, quota is {quota}")
        self.key = key
        self.required = required
        self.quota = quota


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    """Process-local store. ``quota_bytes`` of 0 means unlimited."""

    def __init__(self, quota_bytes: int = 0):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes:
            used = sum(
                len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in self._items.items() if k != key
            )
            required = used + len(key.encode("utf-8")) + len(value.encode("utf-8"))
            if required > self.quota_bytes:
                raise QuotaExceededError(key, required, self.quota_bytes)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class SqlKeyValueStore:
    """Store backed by the ``storage_entries`` table.

    The table is created on first access.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = get_session_factory(engine)
        self._ready = False

    def _ensure_ready(self) -> None:
        if self._ready:
            return
        Base.metadata.create_all(bind=self.engine, tables=[StorageEntry.__table__])
        self._ready = True

    def get_item(self, key: str) -> str | None:
        try:
            self._ensure_ready()
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to read '{key}'") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            self._ensure_ready()
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                if entry:
                    entry.value = value
                else:
                    session.add(StorageEntry(key=key, value=value))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to write '{key}'") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._ensure_ready()
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                if entry:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to remove '{key}'") from exc

    def keys(self) -> list[str]:
        try:
            self._ensure_ready()
            with self._session_factory() as session:
                return list(session.scalars(select(StorageEntry.key).order_by(StorageEntry.key.asc())).all())
        except SQLAlchemyError as exc:
            raise StorageError("failed to list keys") from exc


class StorageAdapter:
    def __init__(self, store: KeyValueStore | None):
        self.store = store
        self._lock = threading.RLock()

    @property
    def available(self) -> bool:
        return self.store is not None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the writer lock across a read-modify-write cycle."""
        with self._lock:
            yield

    def load(self, key: str) -> list[Any]:
        if self.store is None:
            return []

        try:
            raw = self.store.get_item(key)
        except StorageError:
            logger.exception("Error retrieving %s from storage", key)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (RecursionError, ValueError):
            logger.exception("Error parsing %s from storage", key)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON array, got %s", key, type(data).__name__)
            return []
        return data

    def save(self, key: str, records: Sequence[Mapping[str, Any]]) -> None:
        if self.store is None:
            return

        try:
            payload = json.dumps(list(records))
            self.store.set_item(key, payload)
        except (RecursionError, StorageError, TypeError, ValueError):
            logger.exception("Error saving %s to storage", key)
