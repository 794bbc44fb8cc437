from datetime import datetime, timedelta, timezone

import pytest

from core.enums import AlertSeverity, AlertType, ProjectStatus, ResponsibilityLevel
from models.snapshots import AreaSnapshot, ProjectRef
from services.area_health import (
    build_maintenance_overview,
    evaluate_area,
    health_category,
    read_area_health_score,
)


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _area(area_id="a1", **fields):
    fields.setdefault("title", area_id.upper())
    fields.setdefault("health_score", 0.9)
    fields.setdefault("last_activity_at", NOW - timedelta(days=1))
    fields.setdefault("note_count", 1)
    return AreaSnapshot(id=area_id, **fields)


@pytest.mark.parametrize(
    "score, expected",
    [
        (1.0, "excellent"),
        (0.8, "excellent"),
        (0.79999, "good"),
        (0.6, "good"),
        (0.4, "fair"),
        (0.39999, "poor"),
        (0.2, "poor"),
        (0.0, "critical"),
    ],
)
def test_health_category_boundaries(score, expected):
    assert health_category(score) == expected


def test_unscored_area_reads_as_zero():
    assert read_area_health_score(_area(health_score=None)) == 0.0


def test_healthy_area_has_no_alerts():
    report = evaluate_area(_area(), NOW)
    assert report.alerts == ()
    assert not report.needs_attention


def test_overdue_review_is_critical():
    report = evaluate_area(_area(next_review_date=NOW - timedelta(days=3, hours=2)), NOW)
    alert = report.alerts[0]
    assert alert.type == AlertType.REVIEW_OVERDUE
    assert alert.severity == AlertSeverity.CRITICAL
    assert alert.days_overdue == 3
    assert not report.has_alert(AlertType.REVIEW_DUE_SOON)


def test_due_soon_window_is_inclusive():
    report = evaluate_area(_area(next_review_date=NOW + timedelta(days=7)), NOW)
    assert report.has_alert(AlertType.REVIEW_DUE_SOON)
    assert report.alerts[0].days_until_due == 7

    later = evaluate_area(_area(next_review_date=NOW + timedelta(days=7, seconds=1)), NOW)
    assert not later.has_alert(AlertType.REVIEW_DUE_SOON)


def test_low_health_severity():
    warning = evaluate_area(_area(health_score=0.3), NOW)
    critical = evaluate_area(_area(health_score=0.1), NOW)
    assert warning.alerts[0].severity == AlertSeverity.WARNING
    assert critical.alerts[0].severity == AlertSeverity.CRITICAL
    assert critical.alerts[0].message == "Low health score (10%)"
    assert not evaluate_area(_area(health_score=0.4), NOW).has_alert(AlertType.LOW_HEALTH)


def test_inactivity_alerts():
    info = evaluate_area(_area(last_activity_at=NOW - timedelta(days=31)), NOW)
    warning = evaluate_area(_area(last_activity_at=NOW - timedelta(days=61)), NOW)
    never = evaluate_area(_area(last_activity_at=None), NOW)
    recent = evaluate_area(_area(last_activity_at=NOW - timedelta(days=30)), NOW)

    assert info.alerts[0].severity == AlertSeverity.INFO
    assert info.alerts[0].message == "No activity for 31 days"
    assert warning.alerts[0].severity == AlertSeverity.WARNING
    assert never.alerts[0].message == "No activity recorded"
    assert never.days_since_activity is None
    assert not recent.has_alert(AlertType.INACTIVE_AREA)


def test_empty_area_and_inactive_projects():
    empty = evaluate_area(_area(note_count=0), NOW)
    assert empty.alert_types == (AlertType.EMPTY_AREA,)

    stalled = evaluate_area(
        _area(projects=(ProjectRef(id="p1", status=ProjectStatus.COMPLETED),)), NOW
    )
    assert stalled.has_alert(AlertType.NO_ACTIVE_PROJECTS)

    active = evaluate_area(_area(projects=(ProjectRef(id="p2", status=ProjectStatus.ACTIVE),)), NOW)
    assert not active.has_alert(AlertType.NO_ACTIVE_PROJECTS)


def test_one_area_can_raise_several_alerts():
    report = evaluate_area(
        _area(health_score=0.1, next_review_date=NOW - timedelta(days=1), last_activity_at=None, note_count=0),
        NOW,
    )
    assert set(report.alert_types) == {
        AlertType.REVIEW_OVERDUE,
        AlertType.LOW_HEALTH,
        AlertType.INACTIVE_AREA,
        AlertType.EMPTY_AREA,
    }


def test_overview_counts_and_recommendations():
    areas = [
        _area("ok"),
        _area("late", next_review_date=NOW - timedelta(days=2), health_score=0.7),
        _area("sick", health_score=0.1, next_review_date=NOW + timedelta(days=2)),
        _area("idle", last_activity_at=NOW - timedelta(days=45), health_score=None),
    ]
    overview = build_maintenance_overview(areas, NOW)
    counters = overview.overview

    assert counters.total_areas == 4
    assert counters.reviews_overdue == 1
    assert counters.reviews_due_soon == 1
    # ``idle`` has no score, so it also counts as low health.
    assert counters.low_health_areas == 2
    assert counters.inactive_areas == 1
    assert counters.areas_needing_attention == 3
    assert overview.recommendations == [
        "1 area needs immediate review",
        "Focus on improving 2 areas with low health scores",
        "Consider reviewing or archiving 1 inactive area",
    ]


def test_overview_alert_buckets_cover_all_severities():
    overview = build_maintenance_overview([_area(health_score=0.1)], NOW)
    assert set(overview.alerts) == set(AlertSeverity)
    assert [a.area_id for a in overview.alerts[AlertSeverity.CRITICAL]] == ["a1"]
    assert overview.alerts[AlertSeverity.INFO] == []


def test_scheduled_maintenance_is_sorted_and_includes_overdue():
    areas = [
        _area("soon", next_review_date=NOW + timedelta(days=5), responsibility_level=ResponsibilityLevel.HIGH),
        _area("late", next_review_date=NOW - timedelta(days=1)),
        _area("far", next_review_date=NOW + timedelta(days=30)),
    ]
    overview = build_maintenance_overview(areas, NOW)
    assert [item.area_id for item in overview.scheduled_maintenance] == ["late", "soon"]
    assert overview.scheduled_maintenance[1].priority == ResponsibilityLevel.HIGH


def test_distribution_average_and_rankings():
    areas = [
        _area("top", health_score=0.95),
        _area("mid", health_score=0.65),
        _area("low", health_score=0.3),
        _area("none", health_score=None),
    ]
    overview = build_maintenance_overview(areas, NOW)

    assert overview.health_distribution == {
        "excellent": 1,
        "good": 1,
        "fair": 0,
        "poor": 1,
        "critical": 1,
    }
    assert overview.average_health_score == pytest.approx((0.95 + 0.65 + 0.3) / 4)
    assert [s.area_id for s in overview.top_performing] == ["top", "mid", "low"]
    assert [s.area_id for s in overview.needing_attention] == ["none", "low"]
    assert overview.needing_attention[0].issues == ("Low health score",)


def test_needing_attention_flags_low_activity():
    overview = build_maintenance_overview([_area(last_activity_at=NOW - timedelta(days=15))], NOW)
    assert overview.needing_attention[0].issues == ("Low activity",)


def test_empty_portfolio():
    overview = build_maintenance_overview([], NOW)
    assert overview.overview.total_areas == 0
    assert overview.average_health_score == 0
    assert overview.recommendations == []
