"""Test counter deltas and the reconcile job."""
from datetime import date

import pytest

from verticals.tasks.analytics import (
    AnalyticsAggregator,
    compute_delta,
    parse_due_date,
)
from verticals.tasks.models.schemas import TaskCreate


def test_creation_delta():
    delta = compute_delta(new_priority="high", new_status="todo", new_due_date=date(2024, 6, 1))
    assert delta == {"high_priority_tasks": 1, "todo_tasks": 1, "due_date_tasks": 1}


def test_removal_delta_with_negative_weight():
    delta = compute_delta(new_priority="high", new_status="done", weight=-1)
    assert delta == {"high_priority_tasks": -1, "done_tasks": -1}


def test_priority_change_moves_one_bucket():
    delta = compute_delta(old_priority="low", new_priority="moderate")
    assert delta == {"low_priority_tasks": -1, "moderate_priority_tasks": 1}


def test_unchanged_fields_yield_empty_delta():
    assert compute_delta(
        old_priority="low", new_priority="low",
        old_status="todo", new_status="todo",
        old_due_date=date(2024, 1, 1), new_due_date=date(2024, 2, 1),
    ) == {}


def test_due_date_cleared_is_decremented():
    assert compute_delta(old_due_date="2024-06-01", new_due_date=None) == {"due_date_tasks": -1}


def test_unknown_values_are_ignored():
    assert compute_delta(old_priority="urgent", new_priority="high") == {"high_priority_tasks": 1}
    assert compute_delta(new_due_date="not a date") == {}


def test_parse_due_date():
    assert parse_due_date("2024-06-01") == date(2024, 6, 1)
    assert parse_due_date("2024-06-01T10:00:00Z") == date(2024, 6, 1)
    assert parse_due_date("") is None
    assert parse_due_date("31/02/2024") is None


@pytest.mark.asyncio
async def test_apply_delta_is_incremental(session, owner):
    aggregator = AnalyticsAggregator(session)
    await aggregator.apply_delta(owner.id, new_priority="low", new_status="backlog")
    await aggregator.apply_delta(owner.id, new_priority="low", new_status="backlog")
    await aggregator.apply_delta(owner.id, old_status="backlog", new_status="done")
    analytics = owner.analytics()
    assert analytics["low_priority_tasks"] == 2
    assert analytics["backlog_tasks"] == 1
    assert analytics["done_tasks"] == 1


@pytest.mark.asyncio
async def test_reconcile_repairs_drift(session, service, owner):
    await service.create(owner.id, TaskCreate(
        title="Ship release", priority="high", status="todo",
        due_date=date(2024, 6, 1), checklist=[{"title": "tag"}],
    ))
    aggregator = AnalyticsAggregator(session)
    await aggregator.apply_delta(owner.id, new_status="done", new_priority="low")
    assert owner.analytics()["done_tasks"] == 1

    drift = await aggregator.reconcile(owner.id)
    assert drift == {"done_tasks": -1, "low_priority_tasks": -1}
    analytics = owner.analytics()
    assert analytics["done_tasks"] == 0
    assert analytics["high_priority_tasks"] == 1
    assert analytics["due_date_tasks"] == 1

    assert await aggregator.reconcile(owner.id) == {}
