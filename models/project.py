# thinkspace/models/project.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from core.enums import ProjectStatus, TaskPriority
from datetime_utils import utc_now


class Project(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    area_id: Optional[str] = Field(default=None, foreign_key="area.id", index=True)
    title: str
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING, index=True)
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    progress: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


__all__ = ["Project"]
