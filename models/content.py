"""Area content items. Only their existence matters to the maintenance engine."""
from __future__ import annotations

from datetime import datetime
import uuid

from sqlmodel import Field, SQLModel

from datetime_utils import utc_now


class Resource(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    area_id: str = Field(foreign_key="area.id", index=True)
    title: str
    created_at: datetime = Field(default_factory=utc_now)


class Note(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    area_id: str = Field(foreign_key="area.id", index=True)
    title: str
    created_at: datetime = Field(default_factory=utc_now)


class SubInterest(SQLModel, table=True):
    __tablename__ = "sub_interest"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    area_id: str = Field(foreign_key="area.id", index=True)
    title: str
    created_at: datetime = Field(default_factory=utc_now)


__all__ = ["Note", "Resource", "SubInterest"]
