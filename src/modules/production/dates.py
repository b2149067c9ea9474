"""Calendar-day helpers shared by the scheduling and progress functions.

All arithmetic is done on ``datetime.date``. Stage plans have day
granularity, so timestamps are truncated before any comparison.
Timezone conversion of aware datetimes happens in the mappers, before
values reach these helpers.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]


def to_date(value: DateLike) -> Optional[date]:
    """Normalise a date, datetime or ISO-8601 string to a ``date``.

    Returns ``None`` for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            return None
    return None


def add_days(day: date, days: int) -> date:
    """*day* shifted by *days*, saturating at ``date.min`` / ``date.max``."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def days_between(start: date, end: date) -> int:
    """Whole calendar days from *start* to *end* (negative if *end* is earlier)."""
    return (end - start).days
