# thinkspace/models/task.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from core.enums import TaskPriority, TaskStatus
from datetime_utils import utc_now


class Task(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    project_id: Optional[str] = Field(default=None, foreign_key="project.id", index=True)
    parent_task_id: Optional[str] = Field(default=None, foreign_key="task.id")
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(default=TaskStatus.TODO, index=True)
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    position: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TaskDependency(SQLModel, table=True):
    """``task_id`` cannot start before ``depends_on_id`` finishes."""

    __tablename__ = "task_dependency"

    task_id: str = Field(primary_key=True, foreign_key="task.id")
    depends_on_id: str = Field(primary_key=True, foreign_key="task.id")


__all__ = ["Task", "TaskDependency"]
