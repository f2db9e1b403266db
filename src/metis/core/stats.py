from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from metis.core import clock
from metis.types import Interview, Job, JobStats, MonthlyBucket, TimelineEvent

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def parse_interview_instant(interview: Interview) -> datetime | None:
    try:
        instant = datetime.fromisoformat(f"{interview.date.strip()}T{interview.time.strip()}")
    except ValueError:
        return None
    return clock.to_local_naive(instant)


def subtract_month(day: date) -> date:
    """Same day one calendar month earlier, clamped to the end of that month.

    Mar 31 gives Feb 28 (Feb 29 in leap years). Rolling the overflow into
    the next month would give Mar 3 instead and shrink the window.
    """
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def get_job_stats(jobs: Sequence[Job], today: date | None = None) -> JobStats:
    today = today or clock.today()
    window_start = subtract_month(today)

    overall = Counter(job.status for job in jobs)
    recent = Counter()
    recent_total = 0
    for job in jobs:
        created = parse_date(job.date)
        if created is None or not window_start <= created <= today:
            continue
        recent[job.status] += 1
        recent_total += 1

    return JobStats(
        total_applications=len(jobs),
        interviews=overall["Interview"],
        offers=overall["Offer"],
        rejections=overall["Rejected"],
        this_month_applications=recent_total,
        this_month_interviews=recent["Interview"],
        this_month_offers=recent["Offer"],
        this_month_rejections=recent["Rejected"],
    )


def get_monthly_application_data(jobs: Iterable[Job], today: date | None = None) -> list[MonthlyBucket]:
    """Chart buckets for the current year.

    A job counts towards the month it was created in. Interview and offer
    counts reflect the job's status now, not when it reached that status.
    Jobs created in other years are left out.
    """
    current_year = (today or clock.today()).year
    buckets = [MonthlyBucket(name=label) for label in MONTH_LABELS]

    for job in jobs:
        created = parse_date(job.date)
        if created is None or created.year != current_year:
            continue

        bucket = buckets[created.month - 1]
        bucket.applied += 1
        if job.status == "Interview":
            bucket.interviews += 1
        elif job.status == "Offer":
            bucket.offers += 1

    return buckets


def get_upcoming_interviews(
    interviews: Iterable[Interview],
    limit: int | None = None,
    now: datetime | None = None,
) -> list[Interview]:
    now = clock.to_local_naive(now) if now else clock.now()

    scheduled: list[tuple[datetime, Interview]] = []
    for interview in interviews:
        instant = parse_interview_instant(interview)
        if instant is not None and instant > now:
            scheduled.append((instant, interview))

    scheduled.sort(key=lambda item: item[0])
    upcoming = [interview for _, interview in scheduled]
    return upcoming[:limit] if limit else upcoming


def filter_jobs(jobs: Iterable[Job], query: str = "", statuses: Iterable[str] = ()) -> list[Job]:
    needle = query.strip().lower()
    wanted = set(statuses)
    return [
        job
        for job in jobs
        if (not needle or needle in job.position.lower()) and (not wanted or job.status in wanted)
    ]


def count_jobs_for_company(jobs: Iterable[Job], company_name: str) -> int:
    name = company_name.lower()
    return sum(1 for job in jobs if job.company.lower() == name)


def filter_interviews(
    interviews: Iterable[Interview],
    jobs: Iterable[Job],
    query: str = "",
    statuses: Iterable[str] = (),
) -> list[Interview]:
    jobs_by_id = {job.id: job for job in jobs}
    needle = query.strip().lower()
    wanted = set(statuses)

    matches = []
    for interview in interviews:
        job = jobs_by_id.get(interview.job_id)
        if needle and not (
            needle in interview.title.lower()
            or (job is not None and needle in job.company.lower())
            or (job is not None and needle in job.position.lower())
        ):
            continue
        if wanted and (job is None or job.status not in wanted):
            continue
        matches.append(interview)
    return matches


def group_interviews_by_date(interviews: Iterable[Interview]) -> dict[str, list[Interview]]:
    groups: dict[str, list[Interview]] = {}
    for interview in interviews:
        groups.setdefault(interview.date, []).append(interview)

    # unparseable dates go last
    ordered = sorted(groups, key=lambda key: (parse_date(key) is None, parse_date(key) or date.min))
    return {key: groups[key] for key in ordered}


def sort_timeline_events(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Newest first; events with unparseable dates keep their order at the end."""
    return sorted(events, key=lambda event: parse_date(event.date) or date.min, reverse=True)
