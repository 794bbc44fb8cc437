"""Task duration estimation used by the planning engine."""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Protocol

from core.settings import PLANNING
from datetime_utils import whole_days_between


class SupportsDuration(Protocol):
    start_date: Optional[datetime]
    due_date: Optional[datetime]
    estimated_hours: Optional[float]


def estimate_duration_days(task: SupportsDuration, *, hours_per_day: float = PLANNING.hours_per_day) -> int:
    """Return the planned duration of ``task`` in whole days, never less than 1.

    Explicit dates win over the effort estimate; a task with neither is a
    one-day unit of work.
    """

    start = getattr(task, "start_date", None)
    due = getattr(task, "due_date", None)
    if start is not None and due is not None:
        return max(1, whole_days_between(due, start))

    estimated = getattr(task, "estimated_hours", None)
    if estimated:
        return max(1, math.ceil(estimated / hours_per_day))
    return 1


__all__ = ["SupportsDuration", "estimate_duration_days"]
