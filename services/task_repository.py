from __future__ import annotations

from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

from sqlmodel import Session, select

from datetime_utils import ensure_utc, utc_now
from models.project import Project
from models.snapshots import DependencyRef, ProjectSnapshot, SubtaskRef, TaskPlanningData
from models.task import Task, TaskDependency
from storage.db import get_session


def _planning_data(
    task: Task,
    dependencies: Sequence[DependencyRef] = (),
    subtasks: Sequence[SubtaskRef] = (),
) -> TaskPlanningData:
    return TaskPlanningData(
        id=task.id,
        title=task.title,
        status=task.status,
        priority=task.priority,
        start_date=ensure_utc(task.start_date),
        due_date=ensure_utc(task.due_date),
        completed_at=ensure_utc(task.completed_at),
        estimated_hours=task.estimated_hours,
        actual_hours=task.actual_hours,
        position=task.position,
        depends_on=tuple(dependencies),
        parent_task_id=task.parent_task_id,
        subtasks=tuple(subtasks),
        created_at=ensure_utc(task.created_at),
        updated_at=ensure_utc(task.updated_at),
    )


def _project_snapshot(project: Project) -> ProjectSnapshot:
    return ProjectSnapshot(
        id=project.id,
        title=project.title,
        status=project.status,
        priority=project.priority,
        start_date=ensure_utc(project.start_date),
        due_date=ensure_utc(project.due_date),
        completed_at=ensure_utc(project.completed_at),
        progress=project.progress,
        created_at=ensure_utc(project.created_at),
        updated_at=ensure_utc(project.updated_at),
    )


class TaskRepository:
    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    # ----- tasks -----
    def get(self, task_id: str) -> Optional[Task]:
        with self._session_factory() as session:
            return session.get(Task, task_id)

    def add(self, **fields) -> Task:
        with self._session_factory() as session:
            task = Task(**fields)
            session.add(task)
            session.commit()
            session.refresh(task)
            return task

    def update_fields(self, task_id: str, **fields) -> Task:
        with self._session_factory() as session:
            obj = session.get(Task, task_id)
            if not obj:
                raise ValueError("Task not found")
            for key, value in fields.items():
                if not hasattr(obj, key):
                    raise ValueError(f"Unknown task field: {key}")
                setattr(obj, key, value)
            obj.updated_at = utc_now()
            session.add(obj)
            session.commit()
            session.refresh(obj)
            return obj

    def set_actual_hours(self, task_id: str, hours: float) -> bool:
        with self._session_factory() as session:
            obj = session.get(Task, task_id)
            if not obj:
                return False
            obj.actual_hours = hours
            obj.updated_at = utc_now()
            session.add(obj)
            session.commit()
            return True

    def add_dependency(self, task_id: str, depends_on_id: str) -> None:
        if task_id == depends_on_id:
            raise ValueError("Task cannot depend on itself")
        with self._session_factory() as session:
            if session.get(TaskDependency, (task_id, depends_on_id)) is not None:
                return
            session.add(TaskDependency(task_id=task_id, depends_on_id=depends_on_id))
            session.commit()

    def list_for_project(self, project_id: str) -> List[TaskPlanningData]:
        """Planning snapshots for every task of ``project_id`` with dependencies resolved."""

        with self._session_factory() as session:
            stmt = (
                select(Task)
                .where(Task.project_id == project_id)
                .order_by(Task.position.asc(), Task.created_at.asc())
            )
            tasks = list(session.exec(stmt))
            if not tasks:
                return []
            ids = [task.id for task in tasks]

            links = list(session.exec(select(TaskDependency).where(TaskDependency.task_id.in_(ids))))
            referenced_ids = {link.depends_on_id for link in links}
            referenced: Dict[str, Task] = {
                task.id: task for task in session.exec(select(Task).where(Task.id.in_(referenced_ids)))
            }
            dependencies: Dict[str, List[DependencyRef]] = defaultdict(list)
            for link in links:
                target = referenced.get(link.depends_on_id)
                if target is None:
                    continue
                dependencies[link.task_id].append(
                    DependencyRef(id=target.id, title=target.title, completed_at=ensure_utc(target.completed_at))
                )

            subtasks: Dict[str, List[SubtaskRef]] = defaultdict(list)
            for child in session.exec(select(Task).where(Task.parent_task_id.in_(ids))):
                subtasks[child.parent_task_id].append(
                    SubtaskRef(
                        id=child.id,
                        title=child.title,
                        status=child.status,
                        completed_at=ensure_utc(child.completed_at),
                    )
                )

            return [_planning_data(task, dependencies[task.id], subtasks[task.id]) for task in tasks]

    # ----- projects -----
    def add_project(self, **fields) -> Project:
        with self._session_factory() as session:
            project = Project(**fields)
            session.add(project)
            session.commit()
            session.refresh(project)
            return project

    def get_project(self, project_id: str) -> Optional[ProjectSnapshot]:
        with self._session_factory() as session:
            project = session.get(Project, project_id)
            return _project_snapshot(project) if project else None


__all__ = ["TaskRepository"]
