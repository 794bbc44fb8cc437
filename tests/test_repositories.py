from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, SQLModel, create_engine

from core.enums import ProjectStatus, TaskStatus
from models import Note, Resource, SubInterest, Task
from services.area_repository import AreaNotFoundError, AreaRepository
from services.critical_path import analyze_critical_path
from services.task_repository import TaskRepository


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


def test_list_for_project_resolves_dependencies(session_factory):
    repo = TaskRepository(session_factory=session_factory)
    project = repo.add_project(user_id="u1", title="Launch")
    design = repo.add(project_id=project.id, title="Design", estimated_hours=16, position=0)
    build = repo.add(project_id=project.id, title="Build", estimated_hours=24, position=1)
    done = repo.add(
        project_id=project.id,
        title="Kickoff",
        status=TaskStatus.COMPLETED,
        completed_at=NOW,
        position=2,
    )
    repo.add(project_id=project.id, parent_task_id=build.id, title="Wire API", position=3)
    repo.add_dependency(build.id, design.id)
    repo.add_dependency(build.id, done.id)
    repo.add_dependency(build.id, design.id)

    tasks = repo.list_for_project(project.id)

    assert [t.title for t in tasks] == ["Design", "Build", "Kickoff", "Wire API"]
    build_data = tasks[1]
    assert {dep.id for dep in build_data.depends_on} == {design.id, done.id}
    kickoff = next(dep for dep in build_data.depends_on if dep.id == done.id)
    assert kickoff.completed_at == NOW
    assert [sub.title for sub in build_data.subtasks] == ["Wire API"]

    result = analyze_critical_path(tasks)
    assert result.node_for(build.id).earliest_start == 2


def test_self_dependency_rejected(session_factory):
    repo = TaskRepository(session_factory=session_factory)
    task = repo.add(title="Solo")
    with pytest.raises(ValueError):
        repo.add_dependency(task.id, task.id)


def test_task_updates(session_factory):
    repo = TaskRepository(session_factory=session_factory)
    task = repo.add(title="Write")

    assert repo.set_actual_hours(task.id, 2.5) is True
    assert repo.get(task.id).actual_hours == 2.5
    assert repo.set_actual_hours("missing", 1.0) is False

    repo.update_fields(task.id, status=TaskStatus.IN_PROGRESS)
    assert repo.get(task.id).status == TaskStatus.IN_PROGRESS
    with pytest.raises(ValueError):
        repo.update_fields(task.id, colour="red")
    with pytest.raises(ValueError):
        repo.update_fields("missing", status=TaskStatus.TODO)


def test_get_project_snapshot(session_factory):
    repo = TaskRepository(session_factory=session_factory)
    project = repo.add_project(user_id="u1", title="Launch", start_date=NOW)
    snapshot = repo.get_project(project.id)
    assert snapshot.title == "Launch"
    assert snapshot.start_date == NOW
    assert repo.get_project("missing") is None


def test_area_snapshot_aggregates_children(session_factory):
    areas = AreaRepository(session_factory=session_factory)
    tasks = TaskRepository(session_factory=session_factory)
    area = areas.add(user_id="u1", title="Health", health_score=0.7)
    tasks.add_project(user_id="u1", area_id=area.id, title="Run", status=ProjectStatus.ACTIVE)
    tasks.add_project(user_id="u1", area_id=area.id, title="Swim", status=ProjectStatus.COMPLETED)
    areas.add_content(Resource, area.id, "Plan")
    areas.add_content(Note, area.id, "Log")
    areas.add_content(Note, area.id, "Log 2")
    areas.add_content(SubInterest, area.id, "Trail running")
    areas.record_activity(area.id, at=NOW - timedelta(days=3))
    areas.record_activity(area.id, at=NOW - timedelta(days=1))
    areas.add_review(area.id, review_date=NOW - timedelta(days=20), health_score=0.6)
    areas.add_review(area.id, review_date=NOW - timedelta(days=5), health_score=0.7)

    snapshot = areas.get_snapshot(area.id)

    assert snapshot.project_count == 2
    assert snapshot.active_project_count == 1
    assert (snapshot.resource_count, snapshot.note_count, snapshot.sub_interest_count) == (1, 2, 1)
    assert snapshot.last_activity_at == NOW - timedelta(days=1)
    assert [review.health_score for review in snapshot.reviews] == [0.7, 0.6]
    assert not snapshot.is_empty


def test_add_content_rejects_other_models(session_factory):
    areas = AreaRepository(session_factory=session_factory)
    with pytest.raises(ValueError):
        areas.add_content(Task, "a1", "Nope")


def test_list_active_filters_by_user_and_flag(session_factory):
    areas = AreaRepository(session_factory=session_factory)
    areas.add(user_id="u1", title="Finance")
    areas.add(user_id="u1", title="Archive", is_active=False)
    areas.add(user_id="u2", title="Other")
    empty = areas.add(user_id="u1", title="Career")

    listed = areas.list_active("u1")

    assert [a.title for a in listed] == ["Career", "Finance"]
    career = listed[0]
    assert career.id == empty.id
    assert career.is_empty
    assert career.last_activity_at is None


def test_area_update_is_atomic(session_factory):
    areas = AreaRepository(session_factory=session_factory)
    area = areas.add(user_id="u1", title="Home", health_score=0.3)

    with pytest.raises(ValueError):
        areas.update_fields(area.id, health_score=0.9, bogus=True)
    assert areas.get(area.id).health_score == 0.3

    with pytest.raises(AreaNotFoundError):
        areas.update_fields("missing", health_score=0.5)
