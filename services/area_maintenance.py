"""Area maintenance actions: review scheduling, frequency changes, health resets.

Each area in a batch is updated in its own transaction. A failure on one
area is reported in its :class:`MaintenanceResult` and never stops the rest
of the batch.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from core.enums import ReviewFrequency
from core.log import get_logger
from core.settings import AREA_MAINTENANCE, AreaMaintenanceSettings
from datetime_utils import Clock, add_days, add_months, ensure_utc, utc_now
from services.area_repository import AreaNotFoundError, AreaRepository


logger = get_logger("areas.maintenance")


def _frequency_key(frequency: ReviewFrequency | str | None) -> str:
    return str(getattr(frequency, "value", frequency) or "").strip().upper()


def calculate_next_review_date(current: datetime, frequency: ReviewFrequency | str | None) -> datetime:
    """Advance ``current`` by one review period.

    CUSTOM and unrecognised frequencies fall back to one month.
    """

    key = _frequency_key(frequency)
    if key == ReviewFrequency.WEEKLY.value:
        return add_days(current, 7)
    if key == ReviewFrequency.BIWEEKLY.value:
        return add_days(current, 14)
    if key == ReviewFrequency.QUARTERLY.value:
        return add_months(current, 3)
    if key == ReviewFrequency.BIANNUALLY.value:
        return add_months(current, 6)
    if key == ReviewFrequency.ANNUALLY.value:
        return add_months(current, 12)
    return add_months(current, 1)


class MaintenanceAction(str, Enum):
    SCHEDULE_REVIEW = "SCHEDULE_REVIEW"
    UPDATE_REVIEW_FREQUENCY = "UPDATE_REVIEW_FREQUENCY"
    RESET_HEALTH_SCORE = "RESET_HEALTH_SCORE"
    DISMISS_REMINDER = "DISMISS_REMINDER"
    SNOOZE_REMINDER = "SNOOZE_REMINDER"


class MaintenanceOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    FAILED = "FAILED"


@dataclass(frozen=True)
class MaintenanceResult:
    area_id: str
    action: str
    outcome: MaintenanceOutcome
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome == MaintenanceOutcome.SUCCESS


class MaintenanceService:
    def __init__(
        self,
        repository: Optional[AreaRepository] = None,
        *,
        clock: Clock = utc_now,
        settings: AreaMaintenanceSettings = AREA_MAINTENANCE,
    ) -> None:
        self.repository = repository or AreaRepository()
        self.clock = clock
        self.settings = settings

    # ------------------------------------------------------------------
    # Public API
    def schedule_review(self, area_ids: Iterable[str], scheduled_date: datetime) -> List[MaintenanceResult]:
        return self.run(area_ids, MaintenanceAction.SCHEDULE_REVIEW, scheduled_date=scheduled_date)

    def update_review_frequency(
        self, area_ids: Iterable[str], frequency: ReviewFrequency | str
    ) -> List[MaintenanceResult]:
        return self.run(area_ids, MaintenanceAction.UPDATE_REVIEW_FREQUENCY, frequency=frequency)

    def reset_health_scores(self, area_ids: Iterable[str]) -> List[MaintenanceResult]:
        return self.run(area_ids, MaintenanceAction.RESET_HEALTH_SCORE)

    def dismiss_reminders(self, area_ids: Iterable[str]) -> List[MaintenanceResult]:
        return self.run(area_ids, MaintenanceAction.DISMISS_REMINDER)

    def snooze_reminders(
        self, area_ids: Iterable[str], until: Optional[datetime] = None
    ) -> List[MaintenanceResult]:
        return self.run(area_ids, MaintenanceAction.SNOOZE_REMINDER, scheduled_date=until)

    def run(
        self,
        area_ids: Iterable[str],
        action: MaintenanceAction | str,
        *,
        scheduled_date: Optional[datetime] = None,
        frequency: ReviewFrequency | str | None = None,
    ) -> List[MaintenanceResult]:
        action_name = str(getattr(action, "value", action))
        results: List[MaintenanceResult] = []
        for area_id in area_ids:
            result = self._apply(area_id, action_name, scheduled_date, frequency)
            if result.success:
                logger.info("%s applied to area %s", action_name, area_id)
            else:
                logger.warning("%s failed for area %s: %s", action_name, area_id, result.error)
            results.append(result)
        return results

    # ------------------------------------------------------------------
    # Helpers
    def _apply(
        self,
        area_id: str,
        action: str,
        scheduled_date: Optional[datetime],
        frequency: ReviewFrequency | str | None,
    ) -> MaintenanceResult:
        """Existence is checked first, so a missing area reports NOT_FOUND whatever the action."""

        not_found = MaintenanceResult(area_id, action, MaintenanceOutcome.NOT_FOUND, error="Area not found")
        try:
            if self.repository.get(area_id) is None:
                return not_found
            try:
                changes = self._changes_for(action, scheduled_date, frequency)
            except ValueError as exc:
                return MaintenanceResult(area_id, action, MaintenanceOutcome.INVALID_ACTION, error=str(exc))
            self.repository.update_fields(area_id, **changes)
        except AreaNotFoundError:
            return not_found
        except Exception as exc:
            logger.error("Maintenance write for area %s crashed: %s", area_id, exc)
            return MaintenanceResult(area_id, action, MaintenanceOutcome.FAILED, error=str(exc))

        return MaintenanceResult(
            area_id, action, MaintenanceOutcome.SUCCESS, message=f"{action} completed successfully"
        )

    def _changes_for(
        self,
        action: str,
        scheduled_date: Optional[datetime],
        frequency: ReviewFrequency | str | None,
    ) -> Dict[str, Any]:
        now = ensure_utc(self.clock())
        if action == MaintenanceAction.SCHEDULE_REVIEW.value:
            if scheduled_date is None:
                raise ValueError("scheduled_date is required")
            return {"next_review_date": ensure_utc(scheduled_date)}
        if action == MaintenanceAction.UPDATE_REVIEW_FREQUENCY.value:
            try:
                parsed = ReviewFrequency(_frequency_key(frequency))
            except ValueError:
                raise ValueError(f"Unknown review frequency: {frequency}") from None
            return {
                "review_frequency": parsed,
                "next_review_date": calculate_next_review_date(now, parsed),
            }
        if action == MaintenanceAction.RESET_HEALTH_SCORE.value:
            return {"health_score": self.settings.neutral_health}
        if action == MaintenanceAction.DISMISS_REMINDER.value:
            return {"last_reviewed_at": now}
        if action == MaintenanceAction.SNOOZE_REMINDER.value:
            until = ensure_utc(scheduled_date) or now + timedelta(days=self.settings.snooze_days)
            return {"next_review_date": until}
        raise ValueError(f"Unknown action: {action}")


__all__ = [
    "MaintenanceAction",
    "MaintenanceOutcome",
    "MaintenanceResult",
    "MaintenanceService",
    "calculate_next_review_date",
]
