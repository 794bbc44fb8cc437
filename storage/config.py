"""User overrides for the planning thresholds, stored as ``config.json``.

The file holds one object per settings group (``planning``,
``project_health``, ``area_maintenance``, ``time_tracking``). Values found
there replace the frozen defaults from :mod:`core.settings`; missing,
unknown or mistyped entries keep their default.
"""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from core.log import get_logger
from core.settings import (
    AREA_MAINTENANCE,
    CONFIG_PATH,
    PLANNING,
    PROJECT_HEALTH,
    TIME_TRACKING,
    AreaMaintenanceSettings,
    PlanningSettings,
    ProjectHealthSettings,
    TimeTrackingSettings,
)


logger = get_logger("config")


@dataclass
class AppConfig:
    planning: PlanningSettings = field(default_factory=lambda: PLANNING)
    project_health: ProjectHealthSettings = field(default_factory=lambda: PROJECT_HEALTH)
    area_maintenance: AreaMaintenanceSettings = field(default_factory=lambda: AREA_MAINTENANCE)
    time_tracking: TimeTrackingSettings = field(default_factory=lambda: TIME_TRACKING)


SECTIONS = tuple(f.name for f in fields(AppConfig))


def _coerce(default: Any, value: Any) -> Any:
    """Return ``value`` cast to the type of ``default``, or raise ``TypeError``."""
    if isinstance(default, bool) or isinstance(value, bool):
        raise TypeError("booleans are not accepted for numeric settings")
    if isinstance(default, int) and isinstance(value, int):
        return value
    if isinstance(default, float) and isinstance(value, (int, float)):
        return float(value)
    raise TypeError(f"expected {type(default).__name__}, got {type(value).__name__}")


def merge_section(current, overrides: Any):
    """Apply the recognised keys of ``overrides`` to the frozen settings ``current``."""

    if not isinstance(overrides, Mapping):
        return current
    accepted: Dict[str, Any] = {}
    for item in fields(current):
        if item.name not in overrides:
            continue
        try:
            accepted[item.name] = _coerce(getattr(current, item.name), overrides[item.name])
        except TypeError as exc:
            logger.warning("Ignoring config value %s.%s: %s", type(current).__name__, item.name, exc)
    return replace(current, **accepted) if accepted else current


def load_config(path: Optional[Path] = None) -> AppConfig:
    target = Path(path or CONFIG_PATH)
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError:
        data = {}
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable config %s, using defaults: %s", target, exc)
        data = {}
    if not isinstance(data, dict):
        data = {}

    config = AppConfig()
    for section in SECTIONS:
        setattr(config, section, merge_section(getattr(config, section), data.get(section)))
    return config


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    """Write ``config`` next to its destination first, then swap it in."""

    target = Path(path or CONFIG_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    staging = target.with_name(f".{target.name}.partial")
    body = json.dumps(asdict(config), indent=2, sort_keys=True)
    try:
        staging.write_text(body + "\n", encoding="utf-8")
        os.replace(staging, target)
    except OSError:
        staging.unlink(missing_ok=True)
        raise


def update_config(path: Optional[Path] = None, **sections: Mapping[str, Any]) -> AppConfig:
    """Merge per-section overrides, e.g. ``update_config(planning={"hours_per_day": 6})``."""

    config = load_config(path)
    for section, values in sections.items():
        if section not in SECTIONS:
            raise ValueError(f"Unknown config section: {section}")
        setattr(config, section, merge_section(getattr(config, section), values))
    save_config(config, path)
    return config


__all__ = ["AppConfig", "SECTIONS", "load_config", "merge_section", "save_config", "update_config"]
