"""Area health scoring, maintenance alerts and the portfolio overview.

The area health score is a stored value maintained by reviews and explicit
maintenance actions; nothing here derives or rewrites it. Project health
(:mod:`services.project_analytics`) is a separate, freshly computed metric.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from core.enums import AlertSeverity, AlertType, AreaType, ResponsibilityLevel
from core.log import get_logger
from core.settings import AREA_MAINTENANCE, AreaMaintenanceSettings
from datetime_utils import ensure_utc, floor_days_between, resolve_now
from models.snapshots import AreaSnapshot


logger = get_logger("areas.health")

HEALTH_CATEGORIES = ("excellent", "good", "fair", "poor", "critical")


def read_area_health_score(area: AreaSnapshot) -> float:
    """Stored health score of ``area``; an unscored area reads as 0."""
    return float(area.health_score or 0.0)


def health_category(score: float) -> str:
    if score >= 0.8:
        return "excellent"
    if score >= 0.6:
        return "good"
    if score >= 0.4:
        return "fair"
    if score >= 0.2:
        return "poor"
    return "critical"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


@dataclass(frozen=True)
class Alert:
    type: AlertType
    severity: AlertSeverity
    message: str
    days_overdue: Optional[int] = None
    days_until_due: Optional[int] = None
    health_score: Optional[float] = None
    days_since_activity: Optional[int] = None


@dataclass(frozen=True)
class AreaAlert:
    area_id: str
    area_title: str
    area_color: str
    area_type: AreaType
    alert: Alert

    @property
    def type(self) -> AlertType:
        return self.alert.type

    @property
    def severity(self) -> AlertSeverity:
        return self.alert.severity


@dataclass(frozen=True)
class AreaHealthReport:
    area: AreaSnapshot
    health_score: float
    alerts: Tuple[Alert, ...]
    days_since_activity: Optional[int]

    @property
    def alert_types(self) -> Tuple[AlertType, ...]:
        return tuple(alert.type for alert in self.alerts)

    @property
    def needs_attention(self) -> bool:
        attention = {AlertType.REVIEW_OVERDUE, AlertType.LOW_HEALTH, AlertType.INACTIVE_AREA}
        return any(alert.type in attention for alert in self.alerts)

    @property
    def health_category(self) -> str:
        return health_category(self.health_score)

    def has_alert(self, alert_type: AlertType) -> bool:
        return alert_type in self.alert_types

    def area_alerts(self) -> List[AreaAlert]:
        return [
            AreaAlert(
                area_id=self.area.id,
                area_title=self.area.title,
                area_color=self.area.color,
                area_type=self.area.type,
                alert=alert,
            )
            for alert in self.alerts
        ]


def days_since_last_activity(area: AreaSnapshot, now: datetime) -> Optional[int]:
    if area.last_activity_at is None:
        return None
    return floor_days_between(now, area.last_activity_at)


def evaluate_area(
    area: AreaSnapshot,
    now: Optional[datetime] = None,
    *,
    settings: AreaMaintenanceSettings = AREA_MAINTENANCE,
) -> AreaHealthReport:
    """Derive the maintenance alerts for a single area.

    Each rule is checked independently, so one area can raise several
    alerts at once.
    """

    now = resolve_now(now)
    alerts: List[Alert] = []

    next_review = ensure_utc(area.next_review_date)
    if next_review is not None and next_review < now:
        alerts.append(
            Alert(
                type=AlertType.REVIEW_OVERDUE,
                severity=AlertSeverity.CRITICAL,
                message="Review is overdue",
                days_overdue=floor_days_between(now, next_review),
            )
        )
    elif next_review is not None and next_review <= now + timedelta(days=settings.due_soon_days):
        alerts.append(
            Alert(
                type=AlertType.REVIEW_DUE_SOON,
                severity=AlertSeverity.WARNING,
                message="Review due soon",
                days_until_due=floor_days_between(next_review, now),
            )
        )

    score = read_area_health_score(area)
    if score < settings.low_health:
        alerts.append(
            Alert(
                type=AlertType.LOW_HEALTH,
                severity=AlertSeverity.CRITICAL if score < settings.critical_health else AlertSeverity.WARNING,
                message=f"Low health score ({round(score * 100)}%)",
                health_score=score,
            )
        )

    idle_days = days_since_last_activity(area, now)
    if idle_days is None or idle_days > settings.inactive_days:
        severity = AlertSeverity.INFO
        if idle_days is not None and idle_days > settings.inactive_warning_days:
            severity = AlertSeverity.WARNING
        message = f"No activity for {idle_days} days" if idle_days is not None else "No activity recorded"
        alerts.append(
            Alert(
                type=AlertType.INACTIVE_AREA,
                severity=severity,
                message=message,
                days_since_activity=idle_days,
            )
        )

    if area.is_empty:
        alerts.append(Alert(type=AlertType.EMPTY_AREA, severity=AlertSeverity.INFO, message="Area has no content"))

    if area.project_count > 0 and area.active_project_count == 0:
        alerts.append(
            Alert(type=AlertType.NO_ACTIVE_PROJECTS, severity=AlertSeverity.INFO, message="No active projects")
        )

    return AreaHealthReport(area=area, health_score=score, alerts=tuple(alerts), days_since_activity=idle_days)


@dataclass
class MaintenanceCounters:
    total_areas: int = 0
    areas_needing_attention: int = 0
    reviews_overdue: int = 0
    reviews_due_soon: int = 0
    inactive_areas: int = 0
    low_health_areas: int = 0


@dataclass(frozen=True)
class ScheduledReview:
    area_id: str
    area_title: str
    scheduled_date: datetime
    priority: ResponsibilityLevel
    type: str = "SCHEDULED_REVIEW"


@dataclass(frozen=True)
class AreaSummary:
    area_id: str
    title: str
    color: str
    type: AreaType
    health_score: float
    project_count: int
    last_review_date: Optional[datetime]
    issues: Tuple[str, ...] = ()


@dataclass
class MaintenanceOverview:
    overview: MaintenanceCounters
    alerts: Dict[AlertSeverity, List[AreaAlert]]
    recommendations: List[str]
    scheduled_maintenance: List[ScheduledReview]
    health_distribution: Dict[str, int]
    average_health_score: float
    top_performing: List[AreaSummary]
    needing_attention: List[AreaSummary]
    reports: List[AreaHealthReport] = field(default_factory=list)


def _recommendations(counters: MaintenanceCounters) -> List[str]:
    result: List[str] = []
    if counters.reviews_overdue > 0:
        verb = "needs" if counters.reviews_overdue == 1 else "need"
        result.append(f"{_plural(counters.reviews_overdue, 'area')} {verb} immediate review")
    if counters.low_health_areas > 0:
        result.append(f"Focus on improving {_plural(counters.low_health_areas, 'area')} with low health scores")
    if counters.inactive_areas > 0:
        result.append(f"Consider reviewing or archiving {_plural(counters.inactive_areas, 'inactive area')}")
    return result


def _summary(report: AreaHealthReport, issues: Tuple[str, ...] = ()) -> AreaSummary:
    area = report.area
    return AreaSummary(
        area_id=area.id,
        title=area.title,
        color=area.color,
        type=area.type,
        health_score=report.health_score,
        project_count=area.project_count,
        last_review_date=area.last_reviewed_at,
        issues=issues,
    )


def _attention_issues(
    report: AreaHealthReport,
    settings: AreaMaintenanceSettings,
) -> Tuple[str, ...]:
    issues: List[str] = []
    if report.health_score < settings.attention_health:
        issues.append("Low health score")
    if report.has_alert(AlertType.REVIEW_OVERDUE):
        issues.append("Review overdue")
    idle = report.days_since_activity
    if idle is None or idle > settings.low_activity_days:
        issues.append("Low activity")
    return tuple(issues)


def build_maintenance_overview(
    areas: Sequence[AreaSnapshot],
    now: Optional[datetime] = None,
    *,
    settings: AreaMaintenanceSettings = AREA_MAINTENANCE,
) -> MaintenanceOverview:
    """Aggregate per-area reports into the portfolio maintenance dashboard."""

    now = resolve_now(now)
    horizon = now + timedelta(days=settings.due_soon_days)
    counters = MaintenanceCounters(total_areas=len(areas))
    buckets: Dict[AlertSeverity, List[AreaAlert]] = {severity: [] for severity in AlertSeverity}
    distribution = {category: 0 for category in HEALTH_CATEGORIES}
    reports: List[AreaHealthReport] = []
    scheduled: List[ScheduledReview] = []

    for area in areas:
        report = evaluate_area(area, now, settings=settings)
        reports.append(report)

        counters.reviews_overdue += report.has_alert(AlertType.REVIEW_OVERDUE)
        counters.reviews_due_soon += report.has_alert(AlertType.REVIEW_DUE_SOON)
        counters.low_health_areas += report.has_alert(AlertType.LOW_HEALTH)
        counters.inactive_areas += report.has_alert(AlertType.INACTIVE_AREA)
        counters.areas_needing_attention += report.needs_attention

        for area_alert in report.area_alerts():
            buckets[area_alert.severity].append(area_alert)

        distribution[report.health_category] += 1

        next_review = ensure_utc(area.next_review_date)
        if next_review is not None and next_review <= horizon:
            scheduled.append(
                ScheduledReview(
                    area_id=area.id,
                    area_title=area.title,
                    scheduled_date=next_review,
                    priority=area.responsibility_level,
                )
            )

    scheduled.sort(key=lambda item: item.scheduled_date)

    scored = [report for report in reports if report.area.health_score is not None]
    scored.sort(key=lambda report: report.health_score, reverse=True)
    top_performing = [_summary(report) for report in scored[: settings.top_areas_limit]]

    flagged = []
    for report in reports:
        issues = _attention_issues(report, settings)
        if issues:
            flagged.append((report, issues))
    flagged.sort(key=lambda item: item[0].health_score)
    needing_attention = [_summary(report, issues) for report, issues in flagged[: settings.top_areas_limit]]

    average = sum(report.health_score for report in reports) / len(reports) if reports else 0.0

    logger.debug(
        "Maintenance overview: %d areas, %d need attention, %d overdue reviews",
        counters.total_areas,
        counters.areas_needing_attention,
        counters.reviews_overdue,
    )

    return MaintenanceOverview(
        overview=counters,
        alerts=buckets,
        recommendations=_recommendations(counters),
        scheduled_maintenance=scheduled,
        health_distribution=distribution,
        average_health_score=average,
        top_performing=top_performing,
        needing_attention=needing_attention,
        reports=reports,
    )


__all__ = [
    "Alert",
    "AreaAlert",
    "AreaHealthReport",
    "AreaSummary",
    "HEALTH_CATEGORIES",
    "MaintenanceCounters",
    "MaintenanceOverview",
    "ScheduledReview",
    "build_maintenance_overview",
    "days_since_last_activity",
    "evaluate_area",
    "health_category",
    "read_area_health_score",
]
