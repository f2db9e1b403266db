from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

JobStatus = Literal["Saved", "Applied", "Interview", "Offer", "Rejected"]
JOB_STATUSES: tuple[str, ...] = get_args(JobStatus)


class StoredModel(BaseModel):
    """Base for everything persisted or returned to the dashboard.

    Attributes are snake_case in Python; serialized records use the camelCase
    keys the stored collections were written with (``jobId``, ``contactName``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Record(StoredModel):
    """A stored collection entry, addressed by its opaque id."""

    id: str


class JobLinkedRecord(Record):
    job_id: str


class JobCreate(StoredModel):
    company: str
    position: str
    status: JobStatus = "Applied"
    location: str = ""
    salary: str = ""
    url: str = ""
    description: str = ""
    contact_name: str = ""
    contact_email: str = ""


class Job(JobCreate, Record):
    date: str


class NoteCreate(StoredModel):
    job_id: str
    content: str


class Note(NoteCreate, JobLinkedRecord):
    date: str


class TimelineEventCreate(StoredModel):
    job_id: str
    title: str
    date: str
    description: str = ""


class TimelineEvent(TimelineEventCreate, JobLinkedRecord):
    pass


class InterviewCreate(StoredModel):
    job_id: str
    title: str
    date: str
    time: str
    notes: str = ""


class Interview(InterviewCreate, JobLinkedRecord):
    pass


class ContactCreate(StoredModel):
    name: str
    email: str = ""
    phone: str = ""
    company: str = ""
    notes: str = ""


class Contact(ContactCreate, Record):
    pass


class CompanyCreate(StoredModel):
    name: str
    website: str = ""
    notes: str = ""


class Company(CompanyCreate, Record):
    pass


class JobStats(StoredModel):
    total_applications: int = 0
    interviews: int = 0
    offers: int = 0
    rejections: int = 0
    this_month_applications: int = 0
    this_month_interviews: int = 0
    this_month_offers: int = 0
    this_month_rejections: int = 0


class MonthlyBucket(StoredModel):
    name: str
    applied: int = 0
    interviews: int = 0
    offers: int = 0


class CompanySummary(StoredModel):
    company: Company
    job_count: int = 0


class InterviewFilter(BaseModel):
    query: str = ""
    statuses: list[JobStatus] = Field(default_factory=list)
