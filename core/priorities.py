"""Utility helpers for task priorities."""
from __future__ import annotations

from typing import Dict

from core.enums import TaskPriority

# Bonus a priority adds to the task complexity score.
COMPLEXITY_BONUS: Dict[TaskPriority, int] = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 0,
    TaskPriority.HIGH: 15,
    TaskPriority.URGENT: 25,
}

DEFAULT_PRIORITY = TaskPriority.MEDIUM


def normalize_priority(value: TaskPriority | str | None) -> TaskPriority:
    """Map external values onto a known priority, defaulting to MEDIUM."""
    if value is None:
        return DEFAULT_PRIORITY
    if isinstance(value, TaskPriority):
        return value
    try:
        return TaskPriority(str(value).strip().upper())
    except ValueError:
        return DEFAULT_PRIORITY


def priority_complexity(value: TaskPriority | str | None) -> int:
    return COMPLEXITY_BONUS[normalize_priority(value)]


__all__ = ["COMPLEXITY_BONUS", "DEFAULT_PRIORITY", "normalize_priority", "priority_complexity"]
