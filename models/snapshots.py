"""Read-only snapshots handed to the analytics engines.

Repositories copy ORM rows into these frozen dataclasses so the engines
never hold a database session and can never mutate stored records.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from core.enums import (
    AreaType,
    ProjectStatus,
    ResponsibilityLevel,
    ReviewFrequency,
    TaskPriority,
    TaskStatus,
)


@dataclass(frozen=True)
class DependencyRef:
    id: str
    title: str = ""
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class SubtaskRef:
    id: str
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class TaskPlanningData:
    id: str
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    position: int = 0
    depends_on: Tuple[DependencyRef, ...] = ()
    parent_task_id: Optional[str] = None
    subtasks: Tuple[SubtaskRef, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProjectSnapshot:
    id: str
    title: str
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    progress: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProjectRef:
    id: str
    status: ProjectStatus = ProjectStatus.PLANNING


@dataclass(frozen=True)
class ReviewRef:
    id: str
    review_date: datetime
    review_type: str = "MONTHLY"
    health_score: Optional[float] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AreaSnapshot:
    id: str
    title: str
    color: str = "#4F46E5"
    type: AreaType = AreaType.RESPONSIBILITY
    responsibility_level: ResponsibilityLevel = ResponsibilityLevel.MEDIUM
    review_frequency: ReviewFrequency = ReviewFrequency.MONTHLY
    is_active: bool = True
    health_score: Optional[float] = None
    last_reviewed_at: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    projects: Tuple[ProjectRef, ...] = ()
    resource_count: int = 0
    note_count: int = 0
    sub_interest_count: int = 0
    last_activity_at: Optional[datetime] = None
    # Most recent first.
    reviews: Tuple[ReviewRef, ...] = ()
    created_at: Optional[datetime] = None

    @property
    def project_count(self) -> int:
        return len(self.projects)

    @property
    def active_project_count(self) -> int:
        return sum(1 for project in self.projects if project.status == ProjectStatus.ACTIVE)

    @property
    def is_empty(self) -> bool:
        return not (self.projects or self.resource_count or self.note_count or self.sub_interest_count)


__all__ = [
    "AreaSnapshot",
    "DependencyRef",
    "ProjectRef",
    "ProjectSnapshot",
    "ReviewRef",
    "SubtaskRef",
    "TaskPlanningData",
]
