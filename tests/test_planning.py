from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, SQLModel, create_engine

from core import settings
from core.enums import AlertType
from datetime_utils import ensure_utc
from models.snapshots import AreaSnapshot, ProjectSnapshot, TaskPlanningData
from services.area_repository import AreaRepository
from services.planning import PlanningEngine
from storage.config import AppConfig, update_config


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


def _idle_area(days):
    return AreaSnapshot(
        id="a1",
        title="Garden",
        health_score=0.9,
        note_count=1,
        last_activity_at=NOW - timedelta(days=days),
    )


async def _discard(task_id, hours):
    return True


def test_missing_config_file_gives_defaults(config_path):
    engine = PlanningEngine.from_config(config_path)
    assert engine.config == AppConfig()
    assert engine.config.planning is settings.PLANNING
    assert engine.estimate_duration(TaskPlanningData(id="a", title="A", estimated_hours=8)) == 1


def test_hours_per_day_override_reaches_duration_and_critical_path(config_path):
    update_config(config_path, planning={"hours_per_day": 4})
    engine = PlanningEngine.from_config(config_path)

    first = TaskPlanningData(id="a", title="A", estimated_hours=8)
    assert engine.estimate_duration(first) == 2

    result = engine.critical_path([first, TaskPlanningData(id="b", title="B", estimated_hours=6)])
    assert result.project_duration == 2
    assert [node.duration for node in result.nodes] == [2, 2]


def test_inactive_days_override_reaches_area_alerts(config_path):
    area = _idle_area(45)
    assert PlanningEngine().evaluate_area(area, NOW).has_alert(AlertType.INACTIVE_AREA)

    update_config(config_path, area_maintenance={"inactive_days": 90})
    engine = PlanningEngine.from_config(config_path)

    assert not engine.evaluate_area(area, NOW).has_alert(AlertType.INACTIVE_AREA)
    assert engine.maintenance_overview([area], NOW).overview.inactive_areas == 0


def test_reminder_horizon_override(config_path):
    area = AreaSnapshot(id="a1", title="Finance", next_review_date=NOW + timedelta(days=20))
    assert PlanningEngine().review_reminders([area], NOW).summary.total == 0

    update_config(config_path, area_maintenance={"reminder_horizon_days": 30})
    board = PlanningEngine.from_config(config_path).review_reminders([area], NOW)
    assert board.summary.total == 1


def test_project_health_penalty_override(config_path):
    project = ProjectSnapshot(id="p1", title="Launch")
    tasks = [TaskPlanningData(id="t1", title="Late", due_date=NOW - timedelta(days=2))]
    baseline = PlanningEngine().analyze_project(project, tasks, NOW).health_score

    update_config(config_path, project_health={"overdue_penalty": 30})
    tuned = PlanningEngine.from_config(config_path).analyze_project(project, tasks, NOW).health_score

    assert baseline - tuned == 20


def test_maintenance_service_snoozes_with_configured_days(config_path, session_factory):
    update_config(config_path, area_maintenance={"snooze_days": 3})
    engine = PlanningEngine.from_config(config_path)
    repo = AreaRepository(session_factory=session_factory)
    area = repo.add(user_id="u1", title="Health")

    service = engine.maintenance_service(repo, clock=lambda: NOW)
    [result] = service.snooze_reminders([area.id])

    assert result.success
    assert service.settings.snooze_days == 3
    assert ensure_utc(repo.get(area.id).next_review_date) == NOW + timedelta(days=3)


def test_time_tracker_uses_configured_tick_interval(config_path):
    update_config(config_path, time_tracking={"tick_interval_sec": 0.25})
    tracker = PlanningEngine.from_config(config_path).time_tracker("t1", _discard, actual_hours=1.5)

    assert tracker._tick_interval == 0.25
    assert tracker.task_id == "t1"
    assert tracker.actual_hours == 1.5
