from __future__ import annotations

import json
import logging
from typing import Any

import typer
import uvicorn

from metis.api.app import create_app
from metis.config import get_settings
from metis.core.tracker import Tracker, build_tracker
from metis.db.init import init_database
from metis.logging_config import configure_logging
from metis.types import (
    JOB_STATUSES,
    CompanyCreate,
    ContactCreate,
    InterviewCreate,
    InterviewFilter,
    JobCreate,
    StoredModel,
    TimelineEventCreate,
)

app = typer.Typer(help="Metis job application tracker")
jobs_app = typer.Typer(help="Job applications")
notes_app = typer.Typer(help="Notes attached to a job")
timeline_app = typer.Typer(help="Timeline events of a job")
interviews_app = typer.Typer(help="Scheduled interviews")
contacts_app = typer.Typer(help="Contacts")
companies_app = typer.Typer(help="Companies")

app.add_typer(jobs_app, name="jobs")
app.add_typer(notes_app, name="notes")
app.add_typer(timeline_app, name="timeline")
app.add_typer(interviews_app, name="interviews")
app.add_typer(contacts_app, name="contacts")
app.add_typer(companies_app, name="companies")


def _tracker() -> Tracker:
    configure_logging()
    return build_tracker()


def _echo(payload: Any) -> None:
    if isinstance(payload, StoredModel):
        payload = payload.to_record()
    elif isinstance(payload, list):
        payload = [item.to_record() if isinstance(item, StoredModel) else item for item in payload]
    typer.echo(json.dumps(payload, indent=2))


def _check_status(value: str) -> str:
    if value not in JOB_STATUSES:
        raise typer.BadParameter(f"status must be one of {', '.join(JOB_STATUSES)}")
    return value


@app.command("init")
def init_cmd() -> None:
    """Create the data directory and storage tables."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@jobs_app.command("add")
def jobs_add(
    company: str = typer.Option(..., "--company"),
    position: str = typer.Option(..., "--position"),
    status: str = typer.Option("Applied", "--status", callback=_check_status),
    location: str = typer.Option("", "--location"),
    salary: str = typer.Option("", "--salary"),
    url: str = typer.Option("", "--url"),
    description: str = typer.Option("", "--description"),
    contact_name: str = typer.Option("", "--contact-name"),
    contact_email: str = typer.Option("", "--contact-email"),
    notes: str = typer.Option("", "--notes"),
) -> None:
    tracker = _tracker()
    job = tracker.create_job(
        JobCreate(
            company=company,
            position=position,
            status=status,
            location=location,
            salary=salary,
            url=url,
            description=description,
            contact_name=contact_name,
            contact_email=contact_email,
        ),
        initial_notes=notes,
    )
    _echo(job)


@jobs_app.command("list")
def jobs_list(
    query: str = typer.Option("", "--query", help="Match against the position"),
    status: list[str] | None = typer.Option(None, "--status"),
) -> None:
    for value in status or []:
        _check_status(value)
    _echo(_tracker().search_jobs(query=query, statuses=status or []))


@jobs_app.command("show")
def jobs_show(job_id: str = typer.Option(..., "--job-id")) -> None:
    tracker = _tracker()
    job = tracker.jobs.get_by_id(job_id)
    if not job:
        raise typer.BadParameter(f"job {job_id} not found")
    typer.echo(
        json.dumps(
            {
                "job": job.to_record(),
                "notes": [note.to_record() for note in tracker.notes.get_by_job_id(job_id)],
                "timeline": [event.to_record() for event in tracker.job_timeline(job_id)],
                "interviews": [item.to_record() for item in tracker.interviews.get_by_job_id(job_id)],
            },
            indent=2,
        )
    )


@jobs_app.command("edit")
def jobs_edit(
    job_id: str = typer.Option(..., "--job-id"),
    company: str | None = typer.Option(None, "--company"),
    position: str | None = typer.Option(None, "--position"),
    status: str | None = typer.Option(None, "--status"),
    location: str | None = typer.Option(None, "--location"),
    salary: str | None = typer.Option(None, "--salary"),
    url: str | None = typer.Option(None, "--url"),
    description: str | None = typer.Option(None, "--description"),
    contact_name: str | None = typer.Option(None, "--contact-name"),
    contact_email: str | None = typer.Option(None, "--contact-email"),
) -> None:
    tracker = _tracker()
    job = tracker.jobs.get_by_id(job_id)
    if not job:
        raise typer.BadParameter(f"job {job_id} not found")
    if status is not None:
        _check_status(status)

    changes = {
        "company": company,
        "position": position,
        "status": status,
        "location": location,
        "salary": salary,
        "url": url,
        "description": description,
        "contact_name": contact_name,
        "contact_email": contact_email,
    }
    edited = job.model_copy(update={key: value for key, value in changes.items() if value is not None})
    _echo(tracker.edit_job(edited))


@jobs_app.command("delete")
def jobs_delete(job_id: str = typer.Option(..., "--job-id")) -> None:
    tracker = _tracker()
    tracker.delete_job(job_id)
    typer.echo(json.dumps({"deleted": job_id}, indent=2))


@notes_app.command("add")
def notes_add(
    job_id: str = typer.Option(..., "--job-id"),
    content: str = typer.Option(..., "--content"),
) -> None:
    tracker = _tracker()
    if not tracker.jobs.get_by_id(job_id):
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(tracker.add_note(job_id, content))


@notes_app.command("list")
def notes_list(job_id: str = typer.Option(..., "--job-id")) -> None:
    _echo(_tracker().notes.get_by_job_id(job_id))


@timeline_app.command("add")
def timeline_add(
    job_id: str = typer.Option(..., "--job-id"),
    title: str = typer.Option(..., "--title"),
    date: str = typer.Option(..., "--date"),
    description: str = typer.Option("", "--description"),
) -> None:
    tracker = _tracker()
    if not tracker.jobs.get_by_id(job_id):
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(tracker.timeline.add(TimelineEventCreate(job_id=job_id, title=title, date=date, description=description)))


@timeline_app.command("list")
def timeline_list(job_id: str = typer.Option(..., "--job-id")) -> None:
    _echo(_tracker().job_timeline(job_id))


@interviews_app.command("add")
def interviews_add(
    job_id: str = typer.Option(..., "--job-id"),
    title: str = typer.Option(..., "--title"),
    date: str = typer.Option(..., "--date"),
    time: str = typer.Option(..., "--time"),
    notes: str = typer.Option("", "--notes"),
) -> None:
    tracker = _tracker()
    if not tracker.jobs.get_by_id(job_id):
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(tracker.interviews.add(InterviewCreate(job_id=job_id, title=title, date=date, time=time, notes=notes)))


@interviews_app.command("list")
def interviews_list(
    query: str = typer.Option("", "--query"),
    status: list[str] | None = typer.Option(None, "--status"),
) -> None:
    for value in status or []:
        _check_status(value)
    _echo(_tracker().search_interviews(InterviewFilter(query=query, statuses=status or [])))


@interviews_app.command("upcoming")
def interviews_upcoming(limit: int | None = typer.Option(None, "--limit", min=1)) -> None:
    _echo(_tracker().get_upcoming_interviews(limit=limit))


@interviews_app.command("delete")
def interviews_delete(interview_id: str = typer.Option(..., "--interview-id")) -> None:
    _tracker().interviews.delete(interview_id)
    typer.echo(json.dumps({"deleted": interview_id}, indent=2))


@contacts_app.command("add")
def contacts_add(
    name: str = typer.Option(..., "--name"),
    email: str = typer.Option("", "--email"),
    phone: str = typer.Option("", "--phone"),
    company: str = typer.Option("", "--company"),
    notes: str = typer.Option("", "--notes"),
) -> None:
    _echo(_tracker().contacts.add(ContactCreate(name=name, email=email, phone=phone, company=company, notes=notes)))


@contacts_app.command("list")
def contacts_list() -> None:
    _echo(_tracker().contacts.get_all())


@contacts_app.command("delete")
def contacts_delete(contact_id: str = typer.Option(..., "--contact-id")) -> None:
    _tracker().contacts.delete(contact_id)
    typer.echo(json.dumps({"deleted": contact_id}, indent=2))


@companies_app.command("add")
def companies_add(
    name: str = typer.Option(..., "--name"),
    website: str = typer.Option("", "--website"),
    notes: str = typer.Option("", "--notes"),
) -> None:
    _echo(_tracker().companies.add(CompanyCreate(name=name, website=website, notes=notes)))


@companies_app.command("list")
def companies_list() -> None:
    _echo(_tracker().company_summaries())


@companies_app.command("delete")
def companies_delete(company_id: str = typer.Option(..., "--company-id")) -> None:
    _tracker().companies.delete(company_id)
    typer.echo(json.dumps({"deleted": company_id}, indent=2))


@app.command("stats")
def stats_cmd() -> None:
    _echo(_tracker().get_job_stats())


@app.command("monthly")
def monthly_cmd() -> None:
    _echo(_tracker().get_monthly_application_data())


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    level = configure_logging(log_level)
    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=host or settings.app_host,
        port=port or settings.app_port,
        log_level=logging.getLevelName(level).lower(),
    )
