from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from metis.api.deps import get_tracker
from metis.api.schemas import (
    DeletedResponse,
    InterviewRequest,
    JobCreateRequest,
    JobUpdateRequest,
    NoteCreateRequest,
    TimelineEventRequest,
)
from metis.core.tracker import Tracker
from metis.types import (
    JOB_STATUSES,
    Company,
    CompanyCreate,
    CompanySummary,
    Contact,
    ContactCreate,
    Interview,
    InterviewCreate,
    InterviewFilter,
    Job,
    JobCreate,
    JobStats,
    MonthlyBucket,
    Note,
    TimelineEvent,
    TimelineEventCreate,
)

router = APIRouter(prefix="/api", tags=["api"])


def _require_job(tracker: Tracker, job_id: str) -> Job:
    job = tracker.jobs.get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def _check_statuses(statuses: list[str]) -> None:
    unknown = [value for value in statuses if value not in JOB_STATUSES]
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown status: {', '.join(unknown)}")


@router.get("/jobs", response_model=list[Job])
def list_jobs(
    q: str = "",
    status: list[str] = Query(default=[]),
    tracker: Tracker = Depends(get_tracker),
) -> list[Job]:
    _check_statuses(status)
    return tracker.search_jobs(query=q, statuses=status)


@router.post("/jobs", response_model=Job)
def create_job(payload: JobCreateRequest, tracker: Tracker = Depends(get_tracker)) -> Job:
    fields = JobCreate.model_validate(payload.model_dump(exclude={"initial_notes"}))
    return tracker.create_job(fields, initial_notes=payload.initial_notes)


@router.get("/jobs/{job_id}", response_model=Job)
def get_job(job_id: str, tracker: Tracker = Depends(get_tracker)) -> Job:
    return _require_job(tracker, job_id)


@router.put("/jobs/{job_id}", response_model=Job)
def update_job(job_id: str, payload: JobUpdateRequest, tracker: Tracker = Depends(get_tracker)) -> Job:
    job = _require_job(tracker, job_id)
    edited = Job.model_validate(payload.model_dump() | {"id": job.id, "date": job.date})
    return tracker.edit_job(edited)


@router.delete("/jobs/{job_id}", response_model=DeletedResponse)
def delete_job(job_id: str, tracker: Tracker = Depends(get_tracker)) -> DeletedResponse:
    tracker.delete_job(job_id)
    return DeletedResponse(deleted=job_id)


@router.get("/jobs/{job_id}/notes", response_model=list[Note])
def list_job_notes(job_id: str, tracker: Tracker = Depends(get_tracker)) -> list[Note]:
    return tracker.notes.get_by_job_id(job_id)


@router.post("/jobs/{job_id}/notes", response_model=Note)
def add_job_note(job_id: str, payload: NoteCreateRequest, tracker: Tracker = Depends(get_tracker)) -> Note:
    _require_job(tracker, job_id)
    return tracker.add_note(job_id, payload.content)


@router.get("/jobs/{job_id}/timeline", response_model=list[TimelineEvent])
def list_job_timeline(job_id: str, tracker: Tracker = Depends(get_tracker)) -> list[TimelineEvent]:
    return tracker.job_timeline(job_id)


@router.post("/jobs/{job_id}/timeline", response_model=TimelineEvent)
def add_job_timeline_event(
    job_id: str,
    payload: TimelineEventRequest,
    tracker: Tracker = Depends(get_tracker),
) -> TimelineEvent:
    _require_job(tracker, job_id)
    return tracker.timeline.add(TimelineEventCreate(job_id=job_id, **payload.model_dump()))


@router.get("/jobs/{job_id}/interviews", response_model=list[Interview])
def list_job_interviews(job_id: str, tracker: Tracker = Depends(get_tracker)) -> list[Interview]:
    return tracker.interviews.get_by_job_id(job_id)


@router.post("/jobs/{job_id}/interviews", response_model=Interview)
def add_job_interview(job_id: str, payload: InterviewRequest, tracker: Tracker = Depends(get_tracker)) -> Interview:
    _require_job(tracker, job_id)
    return tracker.interviews.add(InterviewCreate(job_id=job_id, **payload.model_dump()))


@router.get("/interviews", response_model=list[Interview])
def list_interviews(
    q: str = "",
    status: list[str] = Query(default=[]),
    tracker: Tracker = Depends(get_tracker),
) -> list[Interview]:
    _check_statuses(status)
    return tracker.search_interviews(InterviewFilter(query=q, statuses=status))


@router.get("/interviews/upcoming", response_model=list[Interview])
def upcoming_interviews(
    limit: int | None = Query(default=None, ge=1),
    tracker: Tracker = Depends(get_tracker),
) -> list[Interview]:
    return tracker.get_upcoming_interviews(limit=limit)


@router.put("/interviews/{interview_id}", response_model=Interview)
def update_interview(
    interview_id: str,
    payload: InterviewCreate,
    tracker: Tracker = Depends(get_tracker),
) -> Interview:
    if not tracker.interviews.get_by_id(interview_id):
        raise HTTPException(status_code=404, detail="Interview not found")
    return tracker.interviews.update(Interview(id=interview_id, **payload.model_dump()))


@router.delete("/interviews/{interview_id}", response_model=DeletedResponse)
def delete_interview(interview_id: str, tracker: Tracker = Depends(get_tracker)) -> DeletedResponse:
    tracker.interviews.delete(interview_id)
    return DeletedResponse(deleted=interview_id)


@router.get("/contacts", response_model=list[Contact])
def list_contacts(tracker: Tracker = Depends(get_tracker)) -> list[Contact]:
    return tracker.contacts.get_all()


@router.post("/contacts", response_model=Contact)
def create_contact(payload: ContactCreate, tracker: Tracker = Depends(get_tracker)) -> Contact:
    return tracker.contacts.add(payload)


@router.put("/contacts/{contact_id}", response_model=Contact)
def update_contact(contact_id: str, payload: ContactCreate, tracker: Tracker = Depends(get_tracker)) -> Contact:
    if not tracker.contacts.get_by_id(contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")
    return tracker.contacts.update(Contact(id=contact_id, **payload.model_dump()))


@router.delete("/contacts/{contact_id}", response_model=DeletedResponse)
def delete_contact(contact_id: str, tracker: Tracker = Depends(get_tracker)) -> DeletedResponse:
    tracker.contacts.delete(contact_id)
    return DeletedResponse(deleted=contact_id)


@router.get("/companies", response_model=list[CompanySummary])
def list_companies(tracker: Tracker = Depends(get_tracker)) -> list[CompanySummary]:
    return tracker.company_summaries()


@router.post("/companies", response_model=Company)
def create_company(payload: CompanyCreate, tracker: Tracker = Depends(get_tracker)) -> Company:
    return tracker.companies.add(payload)


@router.put("/companies/{company_id}", response_model=Company)
def update_company(company_id: str, payload: CompanyCreate, tracker: Tracker = Depends(get_tracker)) -> Company:
    if not tracker.companies.get_by_id(company_id):
        raise HTTPException(status_code=404, detail="Company not found")
    return tracker.companies.update(Company(id=company_id, **payload.model_dump()))


@router.delete("/companies/{company_id}", response_model=DeletedResponse)
def delete_company(company_id: str, tracker: Tracker = Depends(get_tracker)) -> DeletedResponse:
    tracker.companies.delete(company_id)
    return DeletedResponse(deleted=company_id)


@router.get("/stats", response_model=JobStats)
def job_stats(tracker: Tracker = Depends(get_tracker)) -> JobStats:
    return tracker.get_job_stats()


@router.get("/stats/monthly", response_model=list[MonthlyBucket])
def monthly_stats(tracker: Tracker = Depends(get_tracker)) -> list[MonthlyBucket]:
    return tracker.get_monthly_application_data()
