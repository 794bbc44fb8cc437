from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Type

from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from datetime_utils import ensure_utc, utc_now
from models.area import Area, AreaActivity, AreaReview
from models.content import Note, Resource, SubInterest
from models.project import Project
from models.snapshots import AreaSnapshot, ProjectRef, ReviewRef
from storage.db import get_session


class AreaNotFoundError(LookupError):
    def __init__(self, area_id: str):
        super().__init__(f"Area not found: {area_id}")
        self.area_id = area_id


class AreaRepository:
    """Reads areas as :class:`AreaSnapshot` and applies partial updates."""

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    def get(self, area_id: str) -> Optional[Area]:
        with self._session_factory() as session:
            return session.get(Area, area_id)

    def add(self, **fields) -> Area:
        with self._session_factory() as session:
            area = Area(**fields)
            session.add(area)
            session.commit()
            session.refresh(area)
            return area

    def update_fields(self, area_id: str, **changes) -> Area:
        """Apply ``changes`` in a single transaction; nothing is written on error."""

        with self._session_factory() as session:
            area = session.get(Area, area_id)
            if area is None:
                raise AreaNotFoundError(area_id)
            for key, value in changes.items():
                if not hasattr(area, key):
                    raise ValueError(f"Unknown area field: {key}")
                setattr(area, key, value)
            area.updated_at = utc_now()
            session.add(area)
            session.commit()
            session.refresh(area)
            return area

    def record_activity(self, area_id: str, activity_type: str = "UPDATED", at: Optional[datetime] = None) -> None:
        with self._session_factory() as session:
            session.add(AreaActivity(area_id=area_id, type=activity_type, created_at=at or utc_now()))
            session.commit()

    def add_review(
        self,
        area_id: str,
        *,
        review_type: str = "MONTHLY",
        health_score: Optional[float] = None,
        notes: Optional[str] = None,
        review_date: Optional[datetime] = None,
    ) -> AreaReview:
        with self._session_factory() as session:
            review = AreaReview(
                area_id=area_id,
                review_type=review_type,
                health_score=health_score,
                notes=notes,
                review_date=review_date or utc_now(),
            )
            session.add(review)
            session.commit()
            session.refresh(review)
            return review

    def add_content(self, model: Type[SQLModel], area_id: str, title: str) -> None:
        """Attach a resource, note or sub-interest to an area."""
        if model not in (Resource, Note, SubInterest):
            raise ValueError(f"Unsupported content model: {model.__name__}")
        with self._session_factory() as session:
            session.add(model(area_id=area_id, title=title))
            session.commit()

    # ----- snapshots -----
    def get_snapshot(self, area_id: str) -> Optional[AreaSnapshot]:
        with self._session_factory() as session:
            area = session.get(Area, area_id)
            if area is None:
                return None
            return self._snapshots(session, [area])[0]

    def list_active(self, user_id: str) -> List[AreaSnapshot]:
        with self._session_factory() as session:
            stmt = (
                select(Area)
                .where(Area.user_id == user_id, Area.is_active == True)  # noqa: E712
                .order_by(Area.title.asc())
            )
            areas = list(session.exec(stmt))
            return self._snapshots(session, areas)

    def _snapshots(self, session: Session, areas: Sequence[Area]) -> List[AreaSnapshot]:
        if not areas:
            return []
        ids = [area.id for area in areas]

        projects: Dict[str, List[ProjectRef]] = defaultdict(list)
        for project in session.exec(select(Project).where(Project.area_id.in_(ids))):
            projects[project.area_id].append(ProjectRef(id=project.id, status=project.status))

        counts = {model: self._count_by_area(session, model, ids) for model in (Resource, Note, SubInterest)}

        last_activity = dict(
            session.exec(
                select(AreaActivity.area_id, func.max(AreaActivity.created_at))
                .where(AreaActivity.area_id.in_(ids))
                .group_by(AreaActivity.area_id)
            ).all()
        )

        reviews: Dict[str, List[ReviewRef]] = defaultdict(list)
        review_stmt = (
            select(AreaReview)
            .where(AreaReview.area_id.in_(ids))
            .order_by(AreaReview.review_date.desc())
        )
        for review in session.exec(review_stmt):
            reviews[review.area_id].append(
                ReviewRef(
                    id=review.id,
                    review_date=ensure_utc(review.review_date),
                    review_type=review.review_type,
                    health_score=review.health_score,
                    notes=review.notes,
                )
            )

        return [
            AreaSnapshot(
                id=area.id,
                title=area.title,
                color=area.color,
                type=area.type,
                responsibility_level=area.responsibility_level,
                review_frequency=area.review_frequency,
                is_active=area.is_active,
                health_score=area.health_score,
                last_reviewed_at=ensure_utc(area.last_reviewed_at),
                next_review_date=ensure_utc(area.next_review_date),
                projects=tuple(projects[area.id]),
                resource_count=counts[Resource].get(area.id, 0),
                note_count=counts[Note].get(area.id, 0),
                sub_interest_count=counts[SubInterest].get(area.id, 0),
                last_activity_at=ensure_utc(last_activity.get(area.id)),
                reviews=tuple(reviews[area.id]),
                created_at=ensure_utc(area.created_at),
            )
            for area in areas
        ]

    @staticmethod
    def _count_by_area(session: Session, model: Type[SQLModel], ids: Sequence[str]) -> Dict[str, int]:
        stmt = (
            select(model.area_id, func.count())
            .where(model.area_id.in_(ids))
            .group_by(model.area_id)
        )
        return {area_id: count for area_id, count in session.exec(stmt).all()}


__all__ = ["AreaNotFoundError", "AreaRepository"]
