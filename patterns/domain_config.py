"""Dataclass-based domain configuration pattern.

Each vertical defines its thresholds, limits, and policy switches as a
frozen dataclass. This gives you:
- Type safety (IDE autocompletion, mypy checking)
- Default values (sensible out-of-the-box)
- Immutability (frozen=True prevents accidental mutation)
- Easy overrides (from env vars, or config files)
"""

import os
from dataclasses import dataclass, field


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _env_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WindowConfig:
    """Calendar settings for the date-range filters."""

    timezone: str = "UTC"
    week_start: int = 6  # Sunday, datetime.weekday() numbering


@dataclass(frozen=True)
class ChecklistConfig:
    """Checklist limits."""

    min_items: int = 1
    max_items: int = 100
    max_item_title_length: int = 200


@dataclass(frozen=True)
class PolicyConfig:
    """Authorization switches."""

    restrict_checklist_toggle: bool = False


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskTrackerConfig:
    """Complete configuration for the task vertical.

    Usage::

        config = TaskTrackerConfig.default()
        start, end = window_bounds(window, now, config.windows.timezone)
    """

    windows: WindowConfig = field(default_factory=WindowConfig)
    checklist: ChecklistConfig = field(default_factory=ChecklistConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    max_title_length: int = 200

    @classmethod
    def default(cls) -> "TaskTrackerConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "TASKS_") -> "TaskTrackerConfig":
        """Create config from environment variables.

        Example: TASKS_TIMEZONE=Europe/Berlin TASKS_WEEK_START=monday
        """
        windows = WindowConfig()
        tz = os.getenv(f"{prefix}TIMEZONE")
        week_start = os.getenv(f"{prefix}WEEK_START")
        if tz or week_start:
            windows = WindowConfig(
                timezone=tz or windows.timezone,
                week_start=(
                    _parse_weekday(week_start) if week_start else windows.week_start
                ),
            )

        checklist = ChecklistConfig()
        max_items = os.getenv(f"{prefix}MAX_CHECKLIST_ITEMS")
        max_item_title = os.getenv(f"{prefix}MAX_CHECKLIST_ITEM_TITLE_LENGTH")
        if max_items or max_item_title:
            checklist = ChecklistConfig(
                max_items=int(max_items) if max_items else checklist.max_items,
                max_item_title_length=(
                    int(max_item_title) if max_item_title else checklist.max_item_title_length
                ),
            )

        policy = PolicyConfig()
        restrict = _env_bool(f"{prefix}RESTRICT_CHECKLIST_TOGGLE")
        if restrict is not None:
            policy = PolicyConfig(restrict_checklist_toggle=restrict)

        return cls(windows=windows, checklist=checklist, policy=policy)


def _parse_weekday(value: str) -> int:
    value = value.strip().lower()
    if value.isdigit():
        day = int(value)
        if 0 <= day <= 6:
            return day
    elif value in WEEKDAYS:
        return WEEKDAYS.index(value)
    raise ValueError(f"Invalid week start: {value!r}")
