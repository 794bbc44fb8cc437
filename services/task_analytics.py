"""Per-task timeline, dependency and complexity metrics."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.enums import CLOSED_TASK_STATUSES, TaskStatus
from core.priorities import priority_complexity
from datetime_utils import ensure_utc, resolve_now, whole_days_between
from models.snapshots import TaskPlanningData


DUE_SOON_DAYS = 3
LONG_TASK_HOURS = 8


@dataclass(frozen=True)
class TaskAnalytics:
    estimated_hours: float
    actual_hours: float
    time_variance: float
    total_duration: Optional[int]
    time_elapsed: int
    time_remaining: Optional[int]
    time_progress: float
    is_overdue: bool
    is_due_soon: bool
    is_blocked: bool
    completed_subtasks: int
    total_subtasks: int
    subtask_progress: float
    total_dependencies: int
    completed_dependencies: int
    dependency_progress: float
    can_start: bool
    actual_duration: int
    duration_variance: float
    complexity_score: int


def complexity_score(task: TaskPlanningData) -> int:
    score = 10
    score += len(task.subtasks) * 5
    score += len(task.depends_on) * 10
    score += priority_complexity(task.priority)
    if (task.estimated_hours or 0) > LONG_TASK_HOURS:
        score += 20
    return min(100, score)


def analyze_task(task: TaskPlanningData, now: Optional[datetime] = None) -> TaskAnalytics:
    now = resolve_now(now)
    status = TaskStatus(task.status)

    estimated = float(task.estimated_hours or 0)
    actual = float(task.actual_hours or 0)
    time_variance = (actual - estimated) / estimated * 100 if estimated > 0 else 0.0

    start = ensure_utc(task.start_date or task.created_at) or now
    due = ensure_utc(task.due_date)
    completed = ensure_utc(task.completed_at)

    total_duration = whole_days_between(due, start) if due is not None else None
    time_elapsed = whole_days_between(now, start)
    time_remaining = whole_days_between(due, now) if due is not None else None
    time_progress = min(time_elapsed / total_duration * 100, 100.0) if total_duration else 0.0

    is_open = status not in CLOSED_TASK_STATUSES
    is_overdue = due is not None and is_open and now > due
    is_due_soon = due is not None and is_open and now < due and whole_days_between(due, now) <= DUE_SOON_DAYS

    total_subtasks = len(task.subtasks)
    completed_subtasks = sum(1 for sub in task.subtasks if TaskStatus(sub.status) == TaskStatus.COMPLETED)
    subtask_progress = completed_subtasks / total_subtasks * 100 if total_subtasks else 0.0

    total_dependencies = len(task.depends_on)
    completed_dependencies = sum(1 for dep in task.depends_on if dep.completed_at is not None)
    dependency_progress = (
        completed_dependencies / total_dependencies * 100 if total_dependencies else 100.0
    )

    actual_duration = whole_days_between(completed, start) if completed is not None else time_elapsed
    estimated_duration = total_duration or 1
    duration_variance = (actual_duration - estimated_duration) / estimated_duration * 100

    return TaskAnalytics(
        estimated_hours=estimated,
        actual_hours=actual,
        time_variance=time_variance,
        total_duration=total_duration,
        time_elapsed=time_elapsed,
        time_remaining=time_remaining,
        time_progress=time_progress,
        is_overdue=is_overdue,
        is_due_soon=is_due_soon,
        is_blocked=status == TaskStatus.BLOCKED,
        completed_subtasks=completed_subtasks,
        total_subtasks=total_subtasks,
        subtask_progress=subtask_progress,
        total_dependencies=total_dependencies,
        completed_dependencies=completed_dependencies,
        dependency_progress=dependency_progress,
        can_start=completed_dependencies == total_dependencies,
        actual_duration=actual_duration,
        duration_variance=duration_variance,
        complexity_score=complexity_score(task),
    )


__all__ = ["TaskAnalytics", "analyze_task", "complexity_score"]
