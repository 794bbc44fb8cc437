"""Review reminders for areas, grouped by urgency."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence

from core.enums import AreaType, ResponsibilityLevel, ReviewFrequency
from core.log import get_logger
from core.settings import AREA_MAINTENANCE, AreaMaintenanceSettings
from datetime_utils import ensure_utc, floor_days_between, resolve_now
from models.snapshots import AreaSnapshot


logger = get_logger("areas.reminders")

REMINDER_KINDS = ("all", "overdue", "due_soon", "scheduled")

DUE_SOON_DAYS = 3
UPCOMING_DAYS = 7
HIGH_URGENCY_HEALTH = 0.3
HEALTH_ALERT_THRESHOLD = 0.5


class ReminderType(str, Enum):
    OVERDUE = "OVERDUE"
    DUE_SOON = "DUE_SOON"
    UPCOMING = "UPCOMING"
    SCHEDULED = "SCHEDULED"
    NO_SCHEDULE = "NO_SCHEDULE"


class Urgency(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass
class Reminder:
    area_id: str
    area_title: str
    area_color: str
    area_type: AreaType
    responsibility_level: ResponsibilityLevel
    review_frequency: ReviewFrequency
    health_score: Optional[float]
    last_review_date: Optional[datetime]
    next_review_date: Optional[datetime]
    last_activity: Optional[datetime]
    type: ReminderType = ReminderType.NO_SCHEDULE
    urgency: Urgency = Urgency.MEDIUM
    message: str = "No review scheduled"
    days_overdue: Optional[int] = None
    days_until_due: Optional[int] = None
    health_alert: bool = False
    inactivity_alert: bool = False
    days_since_activity: Optional[int] = None

    @property
    def id(self) -> str:
        return f"reminder_{self.area_id}"


@dataclass(frozen=True)
class ReminderSummary:
    total: int = 0
    overdue: int = 0
    due_soon: int = 0
    upcoming: int = 0
    no_schedule: int = 0
    health_alerts: int = 0
    inactivity_alerts: int = 0


@dataclass
class ReminderBoard:
    high: List[Reminder] = field(default_factory=list)
    medium: List[Reminder] = field(default_factory=list)
    low: List[Reminder] = field(default_factory=list)
    summary: ReminderSummary = field(default_factory=ReminderSummary)

    @property
    def all(self) -> List[Reminder]:
        return [*self.high, *self.medium, *self.low]


def _days(count: int) -> str:
    return f"{count} day{'s' if count != 1 else ''}"


def _escalate(current: Urgency) -> Urgency:
    return Urgency.MEDIUM if current == Urgency.LOW else current


def _matches(area: AreaSnapshot, kind: str, now: datetime, settings: AreaMaintenanceSettings) -> bool:
    next_review = ensure_utc(area.next_review_date)
    if kind == "overdue":
        return next_review is not None and next_review < now
    if kind == "due_soon":
        return next_review is not None and now <= next_review <= now + timedelta(days=UPCOMING_DAYS)
    horizon = now + timedelta(days=settings.reminder_horizon_days)
    if kind == "scheduled":
        return next_review is not None and now <= next_review <= horizon
    if next_review is not None and next_review <= horizon:
        return True
    if area.health_score is not None and area.health_score < settings.low_health:
        return True
    last_reviewed = ensure_utc(area.last_reviewed_at)
    stale_before = now - timedelta(days=settings.reminder_stale_review_days)
    return last_reviewed is not None and last_reviewed < stale_before


def build_reminder(
    area: AreaSnapshot,
    now: Optional[datetime] = None,
    *,
    settings: AreaMaintenanceSettings = AREA_MAINTENANCE,
) -> Reminder:
    now = resolve_now(now)
    reminder = Reminder(
        area_id=area.id,
        area_title=area.title,
        area_color=area.color,
        area_type=area.type,
        responsibility_level=area.responsibility_level,
        review_frequency=area.review_frequency,
        health_score=area.health_score,
        last_review_date=area.last_reviewed_at,
        next_review_date=area.next_review_date,
        last_activity=area.last_activity_at,
    )

    next_review = ensure_utc(area.next_review_date)
    if next_review is not None:
        days_until = floor_days_between(next_review, now)
        if days_until < 0:
            reminder.type = ReminderType.OVERDUE
            reminder.urgency = Urgency.HIGH
            reminder.days_overdue = abs(days_until)
            reminder.message = f"Review is {_days(abs(days_until))} overdue"
        else:
            reminder.days_until_due = days_until
            if days_until <= DUE_SOON_DAYS:
                reminder.type = ReminderType.DUE_SOON
                reminder.urgency = Urgency.MEDIUM
                reminder.message = f"Review due in {_days(days_until)}"
            elif days_until <= UPCOMING_DAYS:
                reminder.type = ReminderType.UPCOMING
                reminder.urgency = Urgency.LOW
                reminder.message = f"Review scheduled in {_days(days_until)}"
            else:
                reminder.type = ReminderType.SCHEDULED
                reminder.urgency = Urgency.LOW
                reminder.message = "Next review scheduled"

    score = area.health_score
    if score is not None and score < HIGH_URGENCY_HEALTH:
        reminder.urgency = Urgency.HIGH
        reminder.health_alert = True
    elif score is not None and score < HEALTH_ALERT_THRESHOLD:
        reminder.urgency = _escalate(reminder.urgency)
        reminder.health_alert = True

    last_activity = ensure_utc(area.last_activity_at)
    if last_activity is None:
        reminder.inactivity_alert = True
        reminder.urgency = _escalate(reminder.urgency)
    else:
        idle = floor_days_between(now, last_activity)
        if idle > settings.inactive_days:
            reminder.inactivity_alert = True
            reminder.days_since_activity = idle
            reminder.urgency = _escalate(reminder.urgency)

    return reminder


def _sort_key(area: AreaSnapshot):
    next_review = ensure_utc(area.next_review_date)
    score = area.health_score
    return (
        next_review is None,
        next_review or datetime.min,
        score is None,
        score if score is not None else 0.0,
    )


def build_review_reminders(
    areas: Sequence[AreaSnapshot],
    now: Optional[datetime] = None,
    kind: str = "all",
    limit: Optional[int] = None,
    *,
    settings: AreaMaintenanceSettings = AREA_MAINTENANCE,
) -> ReminderBoard:
    """Filter ``areas`` by ``kind`` and classify each one into a reminder.

    Areas are ordered by next review date, then by health score, before
    ``limit`` is applied. Unknown kinds behave like ``"all"``.
    """

    now = resolve_now(now)
    if kind not in REMINDER_KINDS:
        logger.warning("Unknown reminder kind %r, using 'all'", kind)
        kind = "all"
    limit = settings.reminder_limit if limit is None else limit

    selected = sorted(
        (area for area in areas if area.is_active and _matches(area, kind, now, settings)),
        key=_sort_key,
    )[: max(0, limit)]

    board = ReminderBoard()
    reminders = [build_reminder(area, now, settings=settings) for area in selected]
    for reminder in reminders:
        if reminder.urgency == Urgency.HIGH:
            board.high.append(reminder)
        elif reminder.urgency == Urgency.MEDIUM:
            board.medium.append(reminder)
        else:
            board.low.append(reminder)

    board.summary = ReminderSummary(
        total=len(reminders),
        overdue=sum(1 for r in reminders if r.type == ReminderType.OVERDUE),
        due_soon=sum(1 for r in reminders if r.type == ReminderType.DUE_SOON),
        upcoming=sum(1 for r in reminders if r.type == ReminderType.UPCOMING),
        no_schedule=sum(1 for r in reminders if r.type == ReminderType.NO_SCHEDULE),
        health_alerts=sum(1 for r in reminders if r.health_alert),
        inactivity_alerts=sum(1 for r in reminders if r.inactivity_alert),
    )
    return board


__all__ = [
    "REMINDER_KINDS",
    "Reminder",
    "ReminderBoard",
    "ReminderSummary",
    "ReminderType",
    "Urgency",
    "build_reminder",
    "build_review_reminders",
]
