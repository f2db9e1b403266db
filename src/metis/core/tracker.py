from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime

from metis.config import Settings, get_settings
from metis.core import clock
from metis.core.stats import (
    count_jobs_for_company,
    filter_interviews,
    filter_jobs,
    get_job_stats,
    get_monthly_application_data,
    sort_timeline_events,
)
from metis.db.init import build_storage
from metis.db.repositories import (
    DEFAULT_KEY_PREFIX,
    CompanyRepository,
    ContactRepository,
    InterviewRepository,
    JobRepository,
    NoteRepository,
    TimelineEventRepository,
)
from metis.db.storage import StorageAdapter
from metis.types import (
    CompanySummary,
    Interview,
    InterviewFilter,
    Job,
    JobCreate,
    JobStats,
    MonthlyBucket,
    Note,
    NoteCreate,
    TimelineEvent,
    TimelineEventCreate,
)

logger = logging.getLogger(__name__)


class Tracker:
    """All six collections over one storage adapter, plus the job workflows
    that span more than one of them."""

    def __init__(self, storage: StorageAdapter, key_prefix: str = DEFAULT_KEY_PREFIX):
        self.storage = storage
        self.notes = NoteRepository(storage, key_prefix)
        self.timeline = TimelineEventRepository(storage, key_prefix)
        self.interviews = InterviewRepository(storage, key_prefix)
        self.contacts = ContactRepository(storage, key_prefix)
        self.companies = CompanyRepository(storage, key_prefix)
        self.jobs = JobRepository(
            storage,
            key_prefix,
            dependents=(self.notes, self.timeline, self.interviews),
        )

    def create_job(self, payload: JobCreate, initial_notes: str = "") -> Job:
        with self.storage.transaction():
            job = self.jobs.add(payload)
            self.timeline.add(
                TimelineEventCreate(
                    job_id=job.id,
                    title="Application Created",
                    date=job.date,
                    description=f"Applied for {job.position} at {job.company}",
                )
            )
            if initial_notes:
                self.timeline.add(
                    TimelineEventCreate(
                        job_id=job.id,
                        title="Initial Notes",
                        date=job.date,
                        description=initial_notes,
                    )
                )
        logger.info("Created job %s (%s at %s)", job.id, job.position, job.company)
        return job

    def edit_job(self, job: Job) -> Job:
        """Save an edited job and record a timeline event if its status changed."""
        with self.storage.transaction():
            previous = self.jobs.get_by_id(job.id)
            if previous is None:
                return job

            updated = self.jobs.update(job)
            if previous.status != updated.status:
                self.timeline.add(
                    TimelineEventCreate(
                        job_id=updated.id,
                        title=f"Status changed to {updated.status}",
                        date=clock.today().isoformat(),
                        description=f"Status updated from {previous.status} to {updated.status}",
                    )
                )
                logger.info("Job %s moved from %s to %s", updated.id, previous.status, updated.status)
        return updated

    def delete_job(self, job_id: str) -> None:
        self.jobs.delete(job_id)

    def add_note(self, job_id: str, content: str) -> Note:
        return self.notes.add(NoteCreate(job_id=job_id, content=content))

    def job_timeline(self, job_id: str) -> list[TimelineEvent]:
        return sort_timeline_events(self.timeline.get_by_job_id(job_id))

    def get_job_stats(self, today: date | None = None) -> JobStats:
        return get_job_stats(self.jobs.get_all(), today=today)

    def get_monthly_application_data(self, today: date | None = None) -> list[MonthlyBucket]:
        return get_monthly_application_data(self.jobs.get_all(), today=today)

    def get_upcoming_interviews(self, limit: int | None = None, now: datetime | None = None) -> list[Interview]:
        return self.interviews.get_upcoming(limit=limit, now=now)

    def search_interviews(self, criteria: InterviewFilter | None = None) -> list[Interview]:
        criteria = criteria or InterviewFilter()
        return filter_interviews(
            self.interviews.get_all(),
            self.jobs.get_all(),
            query=criteria.query,
            statuses=criteria.statuses,
        )

    def company_summaries(self) -> list[CompanySummary]:
        jobs = self.jobs.get_all()
        return [
            CompanySummary(company=company, job_count=count_jobs_for_company(jobs, company.name))
            for company in self.companies.get_all()
        ]

    def search_jobs(self, query: str = "", statuses: Iterable[str] = ()) -> list[Job]:
        return filter_jobs(self.jobs.get_all(), query=query, statuses=statuses)


def build_tracker(settings: Settings | None = None) -> Tracker:
    settings = settings or get_settings()
    return Tracker(build_storage(settings), key_prefix=settings.storage_key_prefix)
