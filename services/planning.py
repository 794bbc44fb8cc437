"""Entry point that runs every planning engine with the user's configuration.

The engine functions default to the frozen settings in :mod:`core.settings`.
:class:`PlanningEngine` threads the groups loaded from ``config.json``
through each call instead.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from datetime_utils import Clock, utc_now
from models.snapshots import AreaSnapshot, ProjectSnapshot, TaskPlanningData
from services.area_health import AreaHealthReport, MaintenanceOverview, build_maintenance_overview, evaluate_area
from services.area_maintenance import MaintenanceService
from services.area_reminders import ReminderBoard, build_review_reminders
from services.area_repository import AreaRepository
from services.critical_path import CriticalPathResult, analyze_critical_path
from services.duration import SupportsDuration, estimate_duration_days
from services.project_analytics import ProjectAnalytics, analyze_project
from services.time_tracking import PersistCallback, TickCallback, TimeTracker
from storage.config import AppConfig, load_config


class PlanningEngine:
    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()

    @classmethod
    def from_config(cls, path: Optional[Path] = None) -> "PlanningEngine":
        return cls(load_config(path))

    # ----- tasks and projects -----
    def estimate_duration(self, task: SupportsDuration) -> int:
        return estimate_duration_days(task, hours_per_day=self.config.planning.hours_per_day)

    def critical_path(self, tasks: Sequence[TaskPlanningData]) -> Optional[CriticalPathResult]:
        return analyze_critical_path(tasks, hours_per_day=self.config.planning.hours_per_day)

    def analyze_project(
        self,
        project: ProjectSnapshot,
        tasks: Sequence[TaskPlanningData],
        now: Optional[datetime] = None,
    ) -> ProjectAnalytics:
        return analyze_project(
            project,
            tasks,
            now,
            planning=self.config.planning,
            health=self.config.project_health,
        )

    # ----- areas -----
    def evaluate_area(self, area: AreaSnapshot, now: Optional[datetime] = None) -> AreaHealthReport:
        return evaluate_area(area, now, settings=self.config.area_maintenance)

    def maintenance_overview(
        self, areas: Sequence[AreaSnapshot], now: Optional[datetime] = None
    ) -> MaintenanceOverview:
        return build_maintenance_overview(areas, now, settings=self.config.area_maintenance)

    def review_reminders(
        self,
        areas: Sequence[AreaSnapshot],
        now: Optional[datetime] = None,
        kind: str = "all",
        limit: Optional[int] = None,
    ) -> ReminderBoard:
        return build_review_reminders(areas, now, kind, limit, settings=self.config.area_maintenance)

    def maintenance_service(
        self, repository: Optional[AreaRepository] = None, *, clock: Clock = utc_now
    ) -> MaintenanceService:
        return MaintenanceService(repository, clock=clock, settings=self.config.area_maintenance)

    # ----- time tracking -----
    def time_tracker(
        self,
        task_id: str,
        persist: PersistCallback,
        *,
        actual_hours: float = 0.0,
        estimated_hours: Optional[float] = None,
        clock: Clock = utc_now,
        on_tick: Optional[TickCallback] = None,
    ) -> TimeTracker:
        return TimeTracker(
            task_id,
            persist,
            actual_hours=actual_hours,
            estimated_hours=estimated_hours,
            clock=clock,
            on_tick=on_tick,
            tick_interval_sec=self.config.time_tracking.tick_interval_sec,
        )


__all__ = ["PlanningEngine"]
