# thinkspace/models/area.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from core.enums import AreaType, ResponsibilityLevel, ReviewFrequency
from datetime_utils import utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class Area(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(index=True)
    title: str
    color: str = "#4F46E5"
    type: AreaType = AreaType.RESPONSIBILITY
    responsibility_level: ResponsibilityLevel = ResponsibilityLevel.MEDIUM
    review_frequency: ReviewFrequency = ReviewFrequency.MONTHLY
    is_active: bool = Field(default=True, index=True)
    health_score: Optional[float] = Field(default=None, ge=0, le=1)
    last_reviewed_at: Optional[datetime] = None
    next_review_date: Optional[datetime] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AreaReview(SQLModel, table=True):
    """Append-only review history."""

    __tablename__ = "area_review"

    id: str = Field(default_factory=_new_id, primary_key=True)
    area_id: str = Field(foreign_key="area.id", index=True)
    review_date: datetime = Field(default_factory=utc_now)
    review_type: str = "MONTHLY"
    health_score: Optional[float] = None
    notes: Optional[str] = None


class AreaActivity(SQLModel, table=True):
    __tablename__ = "area_activity"

    id: str = Field(default_factory=_new_id, primary_key=True)
    area_id: str = Field(foreign_key="area.id", index=True)
    type: str = "UPDATED"
    created_at: datetime = Field(default_factory=utc_now, index=True)


__all__ = ["Area", "AreaActivity", "AreaReview"]
