"""Test domain configuration loading."""
import pytest

from patterns.domain_config import TaskTrackerConfig


def test_defaults():
    config = TaskTrackerConfig.default()
    assert config.windows.timezone == "UTC"
    assert config.windows.week_start == 6
    assert config.checklist.min_items == 1
    assert not config.policy.restrict_checklist_toggle


def test_from_env(monkeypatch):
    monkeypatch.setenv("TASKS_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("TASKS_WEEK_START", "monday")
    monkeypatch.setenv("TASKS_MAX_CHECKLIST_ITEMS", "10")
    monkeypatch.setenv("TASKS_MAX_CHECKLIST_ITEM_TITLE_LENGTH", "80")
    monkeypatch.setenv("TASKS_RESTRICT_CHECKLIST_TOGGLE", "true")
    config = TaskTrackerConfig.from_env()
    assert config.windows.timezone == "Europe/Berlin"
    assert config.windows.week_start == 0
    assert config.checklist.max_items == 10
    assert config.checklist.max_item_title_length == 80
    assert config.policy.restrict_checklist_toggle


def test_invalid_week_start(monkeypatch):
    monkeypatch.setenv("TASKS_WEEK_START", "someday")
    with pytest.raises(ValueError, match="Invalid week start"):
        TaskTrackerConfig.from_env()


def test_config_is_frozen():
    config = TaskTrackerConfig.default()
    with pytest.raises(Exception):
        config.max_title_length = 10
