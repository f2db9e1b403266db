from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from metis.config import get_settings


def local_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().timezone)


def now() -> datetime:
    """Current wall-clock time in the configured timezone, without tzinfo.

    Interview dates and times are stored as plain local strings, so they are
    compared against naive local time.
    """
    return datetime.now(local_zone()).replace(tzinfo=None)


def today() -> date:
    return now().date()


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(local_zone()).replace(tzinfo=None)
