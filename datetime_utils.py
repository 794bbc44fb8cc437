from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional


UTC = timezone.utc
SECONDS_PER_DAY = 24 * 60 * 60

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` normalised to UTC, falling back to the wall clock."""

    return ensure_utc(now) if now is not None else utc_now()


def midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def whole_days_between(later: datetime, earlier: datetime) -> int:
    """Number of full days from ``earlier`` to ``later``, truncated toward zero."""

    delta = ensure_utc(later) - ensure_utc(earlier)
    return int(delta.total_seconds() / SECONDS_PER_DAY)


def floor_days_between(later: datetime, earlier: datetime) -> int:
    """Like :func:`whole_days_between` but rounds toward negative infinity."""

    delta = ensure_utc(later) - ensure_utc(earlier)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def add_months(dt: datetime, months: int) -> datetime:
    """Shift ``dt`` by whole calendar months.

    Days past the end of the target month clamp to its last day, so
    ``Jan 31 + 1 month`` lands on the last day of February.
    """

    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def add_days(dt: datetime, days: int) -> datetime:
    return dt + timedelta(days=days)


__all__ = [
    "Clock",
    "SECONDS_PER_DAY",
    "UTC",
    "add_days",
    "add_months",
    "ensure_utc",
    "floor_days_between",
    "midnight_utc",
    "resolve_now",
    "utc_now",
    "whole_days_between",
]
