"""Enumerations shared by models and analytics."""
from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    BLOCKED = "BLOCKED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Tasks in these states are never overdue or due soon.
CLOSED_TASK_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ProjectStatus(str, Enum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AreaType(str, Enum):
    RESPONSIBILITY = "RESPONSIBILITY"
    INTEREST = "INTEREST"
    LEARNING = "LEARNING"
    HEALTH = "HEALTH"
    FINANCE = "FINANCE"
    CAREER = "CAREER"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class ResponsibilityLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ReviewFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    BIANNUALLY = "BIANNUALLY"
    ANNUALLY = "ANNUALLY"
    CUSTOM = "CUSTOM"


class AlertType(str, Enum):
    REVIEW_OVERDUE = "REVIEW_OVERDUE"
    REVIEW_DUE_SOON = "REVIEW_DUE_SOON"
    LOW_HEALTH = "LOW_HEALTH"
    INACTIVE_AREA = "INACTIVE_AREA"
    EMPTY_AREA = "EMPTY_AREA"
    NO_ACTIVE_PROJECTS = "NO_ACTIVE_PROJECTS"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


__all__ = [
    "AlertSeverity",
    "AlertType",
    "AreaType",
    "CLOSED_TASK_STATUSES",
    "ProjectStatus",
    "ResponsibilityLevel",
    "ReviewFrequency",
    "TaskPriority",
    "TaskStatus",
]
