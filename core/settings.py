"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "ThinkSpace"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

DB_PATH = DATA_DIR / "thinkspace.db"
CONFIG_PATH = DATA_DIR / "config.json"
LOG_PATH = LOG_DIR / "planning.log"


@dataclass(frozen=True)
class PlanningSettings:
    hours_per_day: float = 8.0
    due_soon_days: int = 7


@dataclass(frozen=True)
class ProjectHealthSettings:
    overdue_penalty: int = 10
    blocked_penalty: int = 15
    over_budget_threshold: float = 50.0
    over_budget_penalty: int = 20
    schedule_slip_margin: float = 20.0
    schedule_slip_penalty: int = 25


@dataclass(frozen=True)
class AreaMaintenanceSettings:
    due_soon_days: int = 7
    inactive_days: int = 30
    inactive_warning_days: int = 60
    low_health: float = 0.4
    critical_health: float = 0.2
    neutral_health: float = 0.5
    # Dashboard "needs attention" list is broader than the alert rules.
    attention_health: float = 0.6
    low_activity_days: int = 14
    top_areas_limit: int = 5
    snooze_days: int = 7
    reminder_horizon_days: int = 14
    reminder_stale_review_days: int = 60
    reminder_limit: int = 50


@dataclass(frozen=True)
class TimeTrackingSettings:
    tick_interval_sec: float = 1.0


PLANNING = PlanningSettings()
PROJECT_HEALTH = ProjectHealthSettings()
AREA_MAINTENANCE = AreaMaintenanceSettings()
TIME_TRACKING = TimeTrackingSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "LOG_PATH",
    "PLANNING",
    "PROJECT_HEALTH",
    "AREA_MAINTENANCE",
    "TIME_TRACKING",
    "AreaMaintenanceSettings",
    "PlanningSettings",
    "ProjectHealthSettings",
    "TimeTrackingSettings",
    "get_default_data_dir",
]
