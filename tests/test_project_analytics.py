from datetime import datetime, timedelta, timezone

import pytest

from core.enums import TaskPriority, TaskStatus
from core.settings import ProjectHealthSettings
from models.snapshots import ProjectSnapshot, TaskPlanningData
from services.project_analytics import analyze_project, compute_project_health_score


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _project(**fields):
    fields.setdefault("created_at", NOW - timedelta(days=30))
    return ProjectSnapshot(id="p1", title="Launch", **fields)


def _task(task_id, **fields):
    return TaskPlanningData(id=task_id, title=task_id, **fields)


def test_empty_project_has_zeroed_metrics():
    result = analyze_project(_project(), [], NOW)

    assert result.total_tasks == 0
    assert result.completion_rate == 0
    assert result.time_variance == 0
    assert result.time_progress == 0
    assert result.health_score == 100
    assert set(result.tasks_by_status) == set(TaskStatus)
    assert all(count == 0 for count in result.tasks_by_priority.values())


def test_breakdown_and_completion_rate():
    tasks = [
        _task("a", status=TaskStatus.COMPLETED, priority=TaskPriority.HIGH),
        _task("b", status=TaskStatus.COMPLETED),
        _task("c", status=TaskStatus.IN_PROGRESS, priority="urgent"),
        _task("d"),
    ]
    result = analyze_project(_project(), tasks, NOW)

    assert result.completed_tasks == 2
    assert result.completion_rate == 50
    assert result.tasks_by_status[TaskStatus.IN_PROGRESS] == 1
    assert result.tasks_by_priority[TaskPriority.URGENT] == 1
    assert result.tasks_by_priority[TaskPriority.MEDIUM] == 2


def test_time_totals_treat_missing_hours_as_zero():
    tasks = [
        _task("a", estimated_hours=10, actual_hours=12),
        _task("b", estimated_hours=10),
        _task("c", actual_hours=3),
    ]
    result = analyze_project(_project(), tasks, NOW)

    assert result.total_estimated_hours == 20
    assert result.total_actual_hours == 15
    assert result.time_variance == pytest.approx(-25.0)


def test_overdue_and_due_soon_windows():
    tasks = [
        _task("late", due_date=NOW - timedelta(hours=1)),
        _task("late-done", due_date=NOW - timedelta(days=2), status=TaskStatus.COMPLETED),
        _task("edge", due_date=NOW + timedelta(days=7)),
        _task("later", due_date=NOW + timedelta(days=7, seconds=1)),
        _task("now", due_date=NOW),
        _task("cancelled", due_date=NOW + timedelta(days=1), status=TaskStatus.CANCELLED),
    ]
    result = analyze_project(_project(), tasks, NOW)

    assert [task.id for task in result.overdue_tasks] == ["late"]
    assert [task.id for task in result.due_soon_tasks] == ["edge"]


def test_time_progress_uses_explicit_start():
    project = _project(start_date=NOW - timedelta(days=10), due_date=NOW + timedelta(days=30))
    result = analyze_project(project, [], NOW)

    assert result.project_duration == 40
    assert result.days_elapsed == 10
    assert result.time_progress == pytest.approx(25.0)


def test_effective_start_falls_back_to_earliest_task():
    tasks = [
        _task("a", created_at=NOW - timedelta(days=5)),
        _task("b", created_at=NOW - timedelta(days=20)),
    ]
    project = _project(due_date=NOW + timedelta(days=20))
    result = analyze_project(project, tasks, NOW)

    assert result.effective_start == NOW - timedelta(days=20)
    assert result.time_progress == pytest.approx(50.0)


def test_time_progress_caps_at_hundred():
    project = _project(start_date=NOW - timedelta(days=50), due_date=NOW - timedelta(days=10))
    assert analyze_project(project, [], NOW).time_progress == 100


def test_velocity_counts_completed_per_week():
    tasks = [
        _task("a", completed_at=NOW - timedelta(days=1), status=TaskStatus.COMPLETED),
        _task("b", completed_at=NOW - timedelta(days=2), status=TaskStatus.COMPLETED),
        _task("c", completed_at=NOW - timedelta(days=3), status=TaskStatus.COMPLETED),
        _task("d"),
    ]
    project = _project(start_date=NOW - timedelta(days=10))
    result = analyze_project(project, tasks, NOW)

    assert result.velocity == pytest.approx(1.5)


def test_health_penalties_are_additive():
    assert compute_project_health_score(
        overdue_count=1, blocked_count=1, time_variance=60, completion_rate=10, time_progress=50
    ) == 100 - 10 - 15 - 20 - 25


def test_health_score_never_below_zero():
    score = compute_project_health_score(
        overdue_count=20, blocked_count=5, time_variance=0, completion_rate=0, time_progress=0
    )
    assert score == 0


def test_health_thresholds_are_strict():
    assert compute_project_health_score(
        overdue_count=0, blocked_count=0, time_variance=50, completion_rate=30, time_progress=50
    ) == 100


def test_custom_penalties():
    settings = ProjectHealthSettings(overdue_penalty=30)
    score = compute_project_health_score(
        overdue_count=2, blocked_count=0, time_variance=0, completion_rate=0, time_progress=0, settings=settings
    )
    assert score == 40


def test_analysis_reports_health_label():
    tasks = [
        _task("late", due_date=NOW - timedelta(days=1)),
        _task("stuck", status=TaskStatus.BLOCKED),
    ]
    result = analyze_project(_project(), tasks, NOW)

    assert result.health_score == 75
    assert result.health_label == "Good"
    assert [task.id for task in result.blocked_tasks] == ["stuck"]
