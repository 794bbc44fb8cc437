# thinkspace/services/project_analytics.py
from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence, Tuple

from core.enums import CLOSED_TASK_STATUSES, TaskPriority, TaskStatus
from core.log import get_logger
from core.priorities import normalize_priority
from core.settings import PLANNING, PROJECT_HEALTH, PlanningSettings, ProjectHealthSettings
from datetime_utils import ensure_utc, resolve_now, whole_days_between
from models.snapshots import ProjectSnapshot, TaskPlanningData


logger = get_logger("planning.projects")


@dataclass(frozen=True)
class ProjectAnalytics:
    tasks_by_status: Dict[TaskStatus, int]
    tasks_by_priority: Dict[TaskPriority, int]
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    total_estimated_hours: float
    total_actual_hours: float
    time_variance: float
    overdue_tasks: Tuple[TaskPlanningData, ...]
    due_soon_tasks: Tuple[TaskPlanningData, ...]
    blocked_tasks: Tuple[TaskPlanningData, ...]
    effective_start: Optional[datetime]
    project_duration: Optional[int]
    days_elapsed: int
    time_progress: float
    velocity: float
    health_score: int

    @property
    def health_label(self) -> str:
        if self.health_score >= 80:
            return "Excellent"
        if self.health_score >= 60:
            return "Good"
        if self.health_score >= 40:
            return "Fair"
        return "Poor"


def compute_project_health_score(
    *,
    overdue_count: int,
    blocked_count: int,
    time_variance: float,
    completion_rate: float,
    time_progress: float,
    settings: ProjectHealthSettings = PROJECT_HEALTH,
) -> int:
    """Derive a 0-100 project health score; every penalty applies independently."""

    score = 100
    score -= overdue_count * settings.overdue_penalty
    score -= blocked_count * settings.blocked_penalty
    if time_variance > settings.over_budget_threshold:
        score -= settings.over_budget_penalty
    if completion_rate < time_progress - settings.schedule_slip_margin:
        score -= settings.schedule_slip_penalty
    return max(0, score)


def _is_open(task: TaskPlanningData) -> bool:
    return TaskStatus(task.status) not in CLOSED_TASK_STATUSES


def _effective_start(project: ProjectSnapshot, tasks: Sequence[TaskPlanningData]) -> Optional[datetime]:
    if project.start_date is not None:
        return ensure_utc(project.start_date)
    created = [ensure_utc(task.created_at) for task in tasks if task.created_at is not None]
    if created:
        return min(created)
    return ensure_utc(project.created_at)


def analyze_project(
    project: ProjectSnapshot,
    tasks: Sequence[TaskPlanningData],
    now: Optional[datetime] = None,
    *,
    planning: PlanningSettings = PLANNING,
    health: ProjectHealthSettings = PROJECT_HEALTH,
) -> ProjectAnalytics:
    now = resolve_now(now)
    due_soon_limit = now + timedelta(days=planning.due_soon_days)

    status_counts = Counter(TaskStatus(task.status) for task in tasks)
    priority_counts = Counter(normalize_priority(task.priority) for task in tasks)
    tasks_by_status = {status: status_counts.get(status, 0) for status in TaskStatus}
    tasks_by_priority = {priority: priority_counts.get(priority, 0) for priority in TaskPriority}

    total_tasks = len(tasks)
    completed_tasks = tasks_by_status[TaskStatus.COMPLETED]
    completion_rate = completed_tasks / total_tasks * 100 if total_tasks else 0.0

    total_estimated = sum(task.estimated_hours or 0 for task in tasks)
    total_actual = sum(task.actual_hours or 0 for task in tasks)
    time_variance = (total_actual - total_estimated) / total_estimated * 100 if total_estimated > 0 else 0.0

    overdue = tuple(
        task for task in tasks
        if task.due_date is not None and _is_open(task) and ensure_utc(task.due_date) < now
    )
    due_soon = tuple(
        task for task in tasks
        if task.due_date is not None and _is_open(task) and now < ensure_utc(task.due_date) <= due_soon_limit
    )
    blocked = tuple(task for task in tasks if TaskStatus(task.status) == TaskStatus.BLOCKED)

    start = _effective_start(project, tasks)
    due = ensure_utc(project.due_date)
    days_elapsed = whole_days_between(now, start) if start is not None else 0
    project_duration = whole_days_between(due, start) if due is not None and start is not None else None
    time_progress = min(days_elapsed / project_duration * 100, 100.0) if project_duration else 0.0

    weeks_elapsed = max(1, math.ceil(days_elapsed / 7))
    velocity = sum(1 for task in tasks if task.completed_at is not None) / weeks_elapsed

    health_score = compute_project_health_score(
        overdue_count=len(overdue),
        blocked_count=len(blocked),
        time_variance=time_variance,
        completion_rate=completion_rate,
        time_progress=time_progress,
        settings=health,
    )
    logger.debug("Project %s: %d tasks, health %d", project.id, total_tasks, health_score)

    return ProjectAnalytics(
        tasks_by_status=tasks_by_status,
        tasks_by_priority=tasks_by_priority,
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        completion_rate=completion_rate,
        total_estimated_hours=float(total_estimated),
        total_actual_hours=float(total_actual),
        time_variance=time_variance,
        overdue_tasks=overdue,
        due_soon_tasks=due_soon,
        blocked_tasks=blocked,
        effective_start=start,
        project_duration=project_duration,
        days_elapsed=days_elapsed,
        time_progress=time_progress,
        velocity=velocity,
        health_score=health_score,
    )


__all__ = ["ProjectAnalytics", "analyze_project", "compute_project_health_score"]
