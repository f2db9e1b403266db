from __future__ import annotations

from datetime import date, datetime

import pytest

from metis.core import clock
from metis.core.cascade import cascade_delete_job
from metis.core.tracker import Tracker, build_tracker
from metis.types import (
    CompanyCreate,
    InterviewCreate,
    InterviewFilter,
    JobCreate,
    TimelineEventCreate,
)


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch: pytest.MonkeyPatch) -> date:
    day = date(2026, 10, 19)
    monkeypatch.setattr(clock, "today", lambda: day)
    return day


def _seed_job(tracker: Tracker, company: str, dependents: int) -> str:
    job = tracker.jobs.add(JobCreate(company=company, position="Engineer"))
    for n in range(dependents):
        tracker.add_note(job.id, f"note {n}")
        tracker.timeline.add(TimelineEventCreate(job_id=job.id, title=f"event {n}", date="2026-10-01"))
        tracker.interviews.add(
            InterviewCreate(job_id=job.id, title=f"round {n}", date="2026-11-01", time=f"1{n}:00")
        )
    return job.id


def test_delete_job_cascades_to_its_dependents_only(tracker: Tracker) -> None:
    doomed = _seed_job(tracker, "Acme", dependents=3)
    survivor = _seed_job(tracker, "Globex", dependents=2)

    tracker.delete_job(doomed)

    assert tracker.jobs.get_by_id(doomed) is None
    assert tracker.notes.get_by_job_id(doomed) == []
    assert tracker.timeline.get_by_job_id(doomed) == []
    assert tracker.interviews.get_by_job_id(doomed) == []

    assert tracker.jobs.get_by_id(survivor) is not None
    assert len(tracker.notes.get_by_job_id(survivor)) == 2
    assert len(tracker.timeline.get_by_job_id(survivor)) == 2
    assert len(tracker.interviews.get_by_job_id(survivor)) == 2


def test_cascade_removes_orphans_even_when_job_is_already_gone(tracker: Tracker) -> None:
    tracker.add_note("orphan", "left behind")

    tracker.delete_job("orphan")

    assert tracker.notes.get_all() == []


def test_cascade_delete_job_reports_counts(tracker: Tracker) -> None:
    job_id = _seed_job(tracker, "Acme", dependents=2)

    removed = cascade_delete_job(job_id, (tracker.notes, tracker.timeline, tracker.interviews))

    assert removed == {"notes": 2, "timeline": 2, "interviews": 2}


def test_create_job_records_initial_timeline(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE"), initial_notes="Referral from Ada")

    events = tracker.timeline.get_by_job_id(job.id)
    assert [e.title for e in events] == ["Application Created", "Initial Notes"]
    assert events[0].description == "Applied for SRE at Acme"
    assert events[0].date == "2026-10-19"
    assert events[1].description == "Referral from Ada"


def test_create_job_without_notes_records_single_event(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE"))
    assert len(tracker.timeline.get_by_job_id(job.id)) == 1


def test_edit_job_records_status_change(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE", status="Applied"))

    updated = tracker.edit_job(job.model_copy(update={"status": "Interview"}))

    assert updated.status == "Interview"
    titles = [e.title for e in tracker.timeline.get_by_job_id(job.id)]
    assert titles == ["Application Created", "Status changed to Interview"]
    change = tracker.timeline.get_by_job_id(job.id)[-1]
    assert change.description == "Status updated from Applied to Interview"


def test_edit_job_without_status_change_adds_no_event(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE"))

    tracker.edit_job(job.model_copy(update={"salary": "150k"}))

    assert len(tracker.timeline.get_by_job_id(job.id)) == 1
    assert tracker.jobs.get_by_id(job.id).salary == "150k"


def test_edit_unknown_job_is_a_noop(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE"))
    tracker.delete_job(job.id)

    result = tracker.edit_job(job.model_copy(update={"status": "Offer"}))

    assert result.status == "Offer"
    assert tracker.jobs.get_all() == []
    assert tracker.timeline.get_all() == []


def test_job_timeline_is_sorted_newest_first(tracker: Tracker) -> None:
    job = tracker.create_job(JobCreate(company="Acme", position="SRE"))
    tracker.timeline.add(TimelineEventCreate(job_id=job.id, title="Recruiter call", date="2026-10-01"))
    tracker.timeline.add(TimelineEventCreate(job_id=job.id, title="Offer", date="2026-10-25"))

    assert [e.title for e in tracker.job_timeline(job.id)] == ["Offer", "Application Created", "Recruiter call"]


def test_dashboard_views(tracker: Tracker) -> None:
    acme = tracker.create_job(JobCreate(company="Acme", position="SRE", status="Interview"))
    tracker.create_job(JobCreate(company="acme", position="Data", status="Offer"))
    tracker.companies.add(CompanyCreate(name="ACME"))
    tracker.companies.add(CompanyCreate(name="Globex"))
    tracker.interviews.add(InterviewCreate(job_id=acme.id, title="Onsite", date="2026-10-21", time="09:00"))
    tracker.interviews.add(InterviewCreate(job_id=acme.id, title="Screen", date="2026-10-20", time="09:00"))

    stats = tracker.get_job_stats()
    assert (stats.total_applications, stats.interviews, stats.offers) == (2, 1, 1)

    october = tracker.get_monthly_application_data()[9]
    assert (october.applied, october.interviews, october.offers) == (2, 1, 1)

    upcoming = tracker.get_upcoming_interviews(limit=1, now=datetime(2026, 10, 19, 8, 0))
    assert [i.title for i in upcoming] == ["Screen"]

    assert [s.job_count for s in tracker.company_summaries()] == [2, 0]
    assert [i.title for i in tracker.search_interviews(InterviewFilter(query="onsite"))] == ["Onsite"]
    assert [j.status for j in tracker.search_jobs(statuses=["Offer"])] == ["Offer"]
    assert [j.position for j in tracker.search_jobs(query="sre")] == ["SRE"]


def test_build_tracker_uses_configured_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    from metis.config import get_settings

    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_KEY_PREFIX", "test_")
    get_settings.cache_clear()

    tracker = build_tracker()
    tracker.companies.add(CompanyCreate(name="Acme"))

    assert tracker.storage.available
    assert tracker.companies.key == "test_companies"
    assert len(tracker.companies.get_all()) == 1


def test_build_tracker_without_store(monkeypatch: pytest.MonkeyPatch) -> None:
    from metis.config import get_settings

    monkeypatch.setenv("STORAGE_BACKEND", "none")
    get_settings.cache_clear()

    tracker = build_tracker()
    tracker.companies.add(CompanyCreate(name="Acme"))

    assert not tracker.storage.available
    assert tracker.companies.get_all() == []
