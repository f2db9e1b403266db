from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import ValidationError

from metis.core import clock
from metis.core.cascade import JobDependentRepository, cascade_delete_job
from metis.core.stats import get_upcoming_interviews
from metis.db.storage import StorageAdapter
from metis.types import (
    Company,
    CompanyCreate,
    Contact,
    ContactCreate,
    Interview,
    InterviewCreate,
    Job,
    JobCreate,
    JobLinkedRecord,
    Note,
    NoteCreate,
    Record,
    StoredModel,
    TimelineEvent,
    TimelineEventCreate,
)

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "metis_"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

T = TypeVar("T", bound=Record)
L = TypeVar("L", bound=JobLinkedRecord)
C = TypeVar("C", bound=StoredModel)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    return to_base36(time.time_ns() // 1_000_000) + to_base36(secrets.randbits(52))


def display_date(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


class CollectionRepository(Generic[T, C]):
    model: type[T]
    collection: ClassVar[str]

    def __init__(self, storage: StorageAdapter, key_prefix: str = DEFAULT_KEY_PREFIX):
        self.storage = storage
        self.key = f"{key_prefix}{self.collection}"

    def _parse(self, record: Any) -> T | None:
        try:
            return self.model.model_validate(record)
        except ValidationError as exc:
            logger.warning("Skipping invalid record in %s: %s", self.key, exc.errors(include_url=False))
            return None

    def _build(self, payload: C) -> T:
        return self.model.model_validate(payload.model_dump() | {"id": generate_id()})

    def _merge(self, stored: dict[str, Any], item: T) -> T:
        return item

    def get_all(self) -> list[T]:
        items: list[T] = []
        for record in self.storage.load(self.key):
            item = self._parse(record)
            if item is not None:
                items.append(item)
        return items

    def get_by_id(self, record_id: str) -> T | None:
        for item in self.get_all():
            if item.id == record_id:
                return item
        return None

    def save_all(self, items: Sequence[T]) -> None:
        with self.storage.transaction():
            self.storage.save(self.key, [item.to_record() for item in items])

    def add(self, payload: C) -> T:
        item = self._build(payload)
        with self.storage.transaction():
            records = self.storage.load(self.key)
            records.append(item.to_record())
            self.storage.save(self.key, records)
        logger.debug("Added %s to %s", item.id, self.key)
        return item

    def update(self, item: T) -> T:
        record_id = item.id
        with self.storage.transaction():
            records = self.storage.load(self.key)
            for index, record in enumerate(records):
                if isinstance(record, dict) and record.get("id") == record_id:
                    updated = self._merge(record, item)
                    records[index] = updated.to_record()
                    self.storage.save(self.key, records)
                    return updated

        logger.debug("Update skipped, %s not found in %s", record_id, self.key)
        return item

    def delete(self, record_id: str) -> None:
        with self.storage.transaction():
            records = self.storage.load(self.key)
            remaining = [
                record for record in records if not (isinstance(record, dict) and record.get("id") == record_id)
            ]
            if len(remaining) != len(records):
                self.storage.save(self.key, remaining)


class JobLinkedRepository(CollectionRepository[L, C]):
    def get_by_job_id(self, job_id: str) -> list[L]:
        return [item for item in self.get_all() if item.job_id == job_id]

    def delete_by_job_id(self, job_id: str) -> int:
        with self.storage.transaction():
            records = self.storage.load(self.key)
            remaining = [
                record for record in records if not (isinstance(record, dict) and record.get("jobId") == job_id)
            ]
            removed = len(records) - len(remaining)
            if removed:
                self.storage.save(self.key, remaining)
        return removed


class NoteRepository(JobLinkedRepository[Note, NoteCreate]):
    model = Note
    collection = "notes"

    def _build(self, payload: NoteCreate) -> Note:
        return Note(
            id=generate_id(),
            job_id=payload.job_id,
            content=payload.content,
            date=display_date(clock.today()),
        )


class TimelineEventRepository(JobLinkedRepository[TimelineEvent, TimelineEventCreate]):
    model = TimelineEvent
    collection = "timeline"


class InterviewRepository(JobLinkedRepository[Interview, InterviewCreate]):
    model = Interview
    collection = "interviews"

    def get_upcoming(self, limit: int | None = None, now: datetime | None = None) -> list[Interview]:
        return get_upcoming_interviews(self.get_all(), limit=limit, now=now)


class ContactRepository(CollectionRepository[Contact, ContactCreate]):
    model = Contact
    collection = "contacts"


class CompanyRepository(CollectionRepository[Company, CompanyCreate]):
    model = Company
    collection = "companies"


class JobRepository(CollectionRepository[Job, JobCreate]):
    model = Job
    collection = "jobs"

    def __init__(
        self,
        storage: StorageAdapter,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        dependents: Sequence[JobDependentRepository] = (),
    ):
        super().__init__(storage, key_prefix)
        self.dependents = tuple(dependents)

    def _build(self, payload: JobCreate) -> Job:
        fields = payload.model_dump(exclude={"id", "date"})
        return Job(**fields, id=generate_id(), date=clock.today().isoformat())

    def _merge(self, stored: dict[str, Any], item: Job) -> Job:
        # creation date never changes after add
        created = stored.get("date")
        if isinstance(created, str) and created != item.date:
            return item.model_copy(update={"date": created})
        return item

    def delete(self, record_id: str) -> None:
        with self.storage.transaction():
            super().delete(record_id)
            cascade_delete_job(record_id, self.dependents)
