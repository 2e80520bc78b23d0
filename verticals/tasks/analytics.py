"""Per-user analytics counters.

Each user carries one counter per priority, one per status and one for
tasks with a due date. The counters mirror the user's live task set and
are maintained incrementally: every lifecycle operation describes how a
task's classifying fields changed for one user, ``compute_delta`` turns
that into ``{column: amount}``, and ``apply_delta`` writes it as a single
``UPDATE users SET col = col + n``.

``due_date_tasks`` is a live count: it moves only when the presence of a
valid due date changes, so deleting a task or clearing its due date
takes it back out.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from patterns.workflow_states import TaskStatus
from verticals.tasks.models.db_models import ANALYTICS_COLUMNS, Task
from verticals.tasks.models.schemas import Priority
from verticals.tasks.repository import TaskRepository, UserRepository

logger = logging.getLogger(__name__)

PRIORITY_COUNTERS: dict[Priority, str] = {
    Priority.LOW: "low_priority_tasks",
    Priority.MODERATE: "moderate_priority_tasks",
    Priority.HIGH: "high_priority_tasks",
}

STATUS_COUNTERS: dict[TaskStatus, str] = {
    TaskStatus.BACKLOG: "backlog_tasks",
    TaskStatus.TODO: "todo_tasks",
    TaskStatus.IN_PROGRESS: "in_progress_tasks",
    TaskStatus.DONE: "done_tasks",
}

DUE_DATE_COUNTER = "due_date_tasks"


def parse_due_date(value: Any) -> Optional[date]:
    """Return the value as a date, or None if absent or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _bucket_delta(
    delta: Counter,
    buckets: dict,
    parse,
    old: Any,
    new: Any,
    weight: int,
) -> None:
    old_key, new_key = parse(old), parse(new)
    if old_key == new_key:
        return
    if old_key is not None:
        delta[buckets[old_key]] -= weight
    if new_key is not None:
        delta[buckets[new_key]] += weight


def compute_delta(
    old_priority: Any = None,
    new_priority: Any = None,
    old_status: Any = None,
    new_status: Any = None,
    old_due_date: Any = None,
    new_due_date: Any = None,
    weight: int = 1,
) -> dict[str, int]:
    """Counter adjustments for one user, as ``{column: amount}``.

    Old values are decremented by ``weight`` and new values incremented by
    it, per bucket family, and only when old and new differ. Absent or
    unrecognised values contribute nothing. A creation passes only new
    values with weight 1; a removal passes the task's values as new with
    weight -1 (or as old with weight 1, which is equivalent).

    Zero entries are dropped, so an unchanged task yields ``{}``.
    """
    delta: Counter = Counter()
    _bucket_delta(delta, PRIORITY_COUNTERS, Priority.parse, old_priority, new_priority, weight)
    _bucket_delta(delta, STATUS_COUNTERS, TaskStatus.parse, old_status, new_status, weight)

    had_due = parse_due_date(old_due_date) is not None
    has_due = parse_due_date(new_due_date) is not None
    if had_due != has_due:
        delta[DUE_DATE_COUNTER] += weight if has_due else -weight

    return {column: amount for column, amount in delta.items() if amount}


def contribution(task: Task, weight: int = 1) -> dict[str, int]:
    """What a single task adds to a member's counters."""
    return compute_delta(
        new_priority=task.priority,
        new_status=task.status,
        new_due_date=task.due_date,
        weight=weight,
    )


class AnalyticsAggregator:
    """Applies counter deltas and repairs drifted counters."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.tasks = TaskRepository(session)

    async def apply_delta(
        self,
        user_id: UUID,
        old_priority: Any = None,
        new_priority: Any = None,
        old_status: Any = None,
        new_status: Any = None,
        old_due_date: Any = None,
        new_due_date: Any = None,
        weight: int = 1,
    ) -> dict[str, int]:
        """Compute and atomically apply one user's delta. Returns the delta."""
        delta = compute_delta(
            old_priority, new_priority,
            old_status, new_status,
            old_due_date, new_due_date,
            weight,
        )
        await self.apply(user_id, delta)
        return delta

    async def apply(self, user_id: UUID, delta: dict[str, int]) -> None:
        if not delta:
            return
        logger.debug("analytics delta user=%s %s", user_id, delta)
        await self.users.increment(user_id, delta)

    async def add_task(self, user_id: UUID, task: Task) -> None:
        await self.apply(user_id, contribution(task, weight=1))

    async def remove_task(self, user_id: UUID, task: Task) -> None:
        await self.apply(user_id, contribution(task, weight=-1))

    async def recompute(self, user_id: UUID) -> dict[str, int]:
        """Counters derived from scratch from the user's membership."""
        totals: Counter = Counter({column: 0 for column in ANALYTICS_COLUMNS})
        for task in await self.tasks.member_tasks(user_id):
            totals.update(contribution(task))
        return dict(totals)

    async def reconcile(self, user_id: UUID) -> dict[str, int]:
        """Overwrite the stored counters with recomputed values.

        Idempotent. Returns the per-column correction that was needed.
        """
        user = await self.users.get(user_id)
        if user is None:
            return {}
        expected = await self.recompute(user.id)
        drift = {
            column: expected[column] - (getattr(user, column) or 0)
            for column in ANALYTICS_COLUMNS
            if expected[column] != (getattr(user, column) or 0)
        }
        if drift:
            logger.warning("analytics drift repaired user=%s %s", user.id, drift)
            await self.users.update(user.id, expected)
        return drift
