from __future__ import annotations

from metis.types import JobCreate, StoredModel


class JobCreateRequest(JobCreate):
    initial_notes: str = ""


class JobUpdateRequest(JobCreate):
    pass


class NoteCreateRequest(StoredModel):
    content: str


class TimelineEventRequest(StoredModel):
    title: str
    date: str
    description: str = ""


class InterviewRequest(StoredModel):
    title: str
    date: str
    time: str
    notes: str = ""


class DeletedResponse(StoredModel):
    deleted: str
