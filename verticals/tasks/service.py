"""Task lifecycle service.

Orchestrates every task mutation: validate the payload, load the task and
users, ask the authorization rules, mutate, then keep the membership sets
and analytics counters of every affected user in step.

A service instance works inside one session. Nothing here commits; the
session owner (``get_session`` for requests) commits the task row, the
membership rows and every counter update together, or rolls all of them
back.

Counter bookkeeping works on *member sets*: the distinct users (owner and,
if present, assignee) whose membership includes the task. For a change,
users in both the old and new member set get an old→new delta, users who
leave lose the old contribution and users who join gain the new one. An
owner who assigns a task to themselves is counted once.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.errors import Forbidden, InvalidInput, NotFound
from patterns.domain_config import TaskTrackerConfig
from patterns.repository import coerce_uuid
from patterns.rules_engine import RuleResult, evaluate_rules
from patterns.workflow_states import TaskStatus, transition
from verticals.tasks.analytics import AnalyticsAggregator
from verticals.tasks.config import config as default_config
from verticals.tasks.models.db_models import Task, User
from verticals.tasks.models.schemas import (
    ChecklistItem,
    Priority,
    TaskCreate,
    TaskUpdate,
    Window,
)
from verticals.tasks.range_filter import to_utc, window_bounds
from verticals.tasks.repository import (
    MembershipRepository,
    TaskRepository,
    UserRepository,
)
from verticals.tasks.rules import (
    TaskAction,
    build_policy,
    check_checklist,
    check_permission,
    check_priority,
    check_status,
    check_title,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _checklist(items: list[ChecklistItem] | list[dict] | None) -> list[dict]:
    rows = []
    for item in items or []:
        if isinstance(item, ChecklistItem):
            item = item.model_dump()
        rows.append({"title": item["title"], "completed": bool(item.get("completed", False))})
    return rows


class TaskService:
    """Create, edit, transition, delete and query tasks for a caller."""

    def __init__(
        self,
        session: AsyncSession,
        config: Optional[TaskTrackerConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self.config = config or default_config
        self.clock = clock or _utcnow
        self.policy = build_policy(self.config.policy.restrict_checklist_toggle)

        self.users = UserRepository(session)
        self.tasks = TaskRepository(session)
        self.memberships = MembershipRepository(session)
        self.analytics = AnalyticsAggregator(session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_user(self, user_id: Any, message: str = "User not found") -> User:
        user = await self.users.get(user_id) if user_id is not None else None
        if user is None:
            raise NotFound(message)
        return user

    async def _require_task(self, task_id: Any) -> Task:
        task = await self.tasks.get(task_id)
        if task is None:
            raise NotFound("Task not found")
        return task

    def _authorize(self, action: TaskAction, caller_id: Any, task: Task) -> None:
        result = check_permission(
            action,
            coerce_uuid(caller_id),
            task.owner_id,
            task.assignee_id,
            policy=self.policy,
        )
        if not result.passed:
            logger.warning(
                "Rejected %s on task=%s by caller=%s", action.value, task.id, caller_id
            )
            raise Forbidden(result.message)

    @staticmethod
    def _validate(*rules: RuleResult) -> None:
        outcome = evaluate_rules(*rules)
        if not outcome.all_passed:
            raise InvalidInput(outcome.first_failure.message)

    def _checklist_rule(self, items) -> RuleResult:
        limits = self.config.checklist
        return check_checklist(
            items, limits.min_items, limits.max_items, limits.max_item_title_length
        )

    async def _sync_members(
        self,
        task: Task,
        before: set[UUID],
        after: set[UUID],
        old: dict[str, Any],
    ) -> None:
        """Bring memberships and counters in line after ``task`` changed.

        ``old`` holds the task's priority, status and due date as they were
        before the change; ``task`` holds the current values.
        """
        for user_id in after:
            await self.memberships.add(user_id, task.id)
        for user_id in before - after:
            await self.memberships.remove(user_id, task.id)

        for user_id in before & after:
            await self.analytics.apply_delta(
                user_id,
                old_priority=old["priority"], new_priority=task.priority,
                old_status=old["status"], new_status=task.status,
                old_due_date=old["due_date"], new_due_date=task.due_date,
            )
        for user_id in before - after:
            await self.analytics.apply_delta(
                user_id,
                new_priority=old["priority"],
                new_status=old["status"],
                new_due_date=old["due_date"],
                weight=-1,
            )
        for user_id in after - before:
            await self.analytics.add_task(user_id, task)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, caller_id: Any, payload: TaskCreate) -> dict:
        """Create a task owned by the caller, optionally assigned."""
        self._validate(
            check_title(payload.title, self.config.max_title_length),
            check_priority(payload.priority),
            check_status(payload.status),
            self._checklist_rule(payload.checklist),
        )

        owner = await self._require_user(caller_id)
        assignee = None
        if payload.assignee_id is not None:
            assignee = await self._require_user(payload.assignee_id, "Assigned user not found")

        task = await self.tasks.create({
            "title": payload.title.strip(),
            "priority": Priority(payload.priority).value,
            "status": TaskStatus(payload.status).value,
            "due_date": payload.due_date,
            "checklist": _checklist(payload.checklist),
            "owner_id": owner.id,
            "owner": owner,
            "assignee_id": assignee.id if assignee else None,
            "assignee": assignee,
            "created_at": self.clock().astimezone(timezone.utc),
        })

        for user_id in task.member_ids():
            await self.memberships.add(user_id, task.id)
            await self.analytics.add_task(user_id, task)

        logger.info(
            "Task created id=%s owner=%s assignee=%s",
            task.id, owner.id, assignee.id if assignee else None,
        )
        return task.to_dict()

    # ------------------------------------------------------------------
    # Status change
    # ------------------------------------------------------------------

    async def change_status(self, caller_id: Any, task_id: Any, status: Any) -> dict:
        """Move a task to another column. Owner or assignee only."""
        caller = await self._require_user(caller_id)
        task = await self._require_task(task_id)
        self._authorize(TaskAction.CHANGE_STATUS, caller.id, task)
        self._validate(check_status(status))

        record = transition(
            str(task.id),
            TaskStatus(task.status),
            TaskStatus.parse(status),
            actor=str(caller.id),
        )
        task.status = record.to_state.value
        await self.session.flush()

        for user_id in task.member_ids():
            await self.analytics.apply_delta(
                user_id,
                old_status=record.from_state,
                new_status=record.to_state,
            )

        logger.info(
            "Task status id=%s %s -> %s by %s at %s",
            record.task_id, record.from_state.value, record.to_state.value,
            record.actor, record.timestamp.isoformat(),
        )
        return task.to_dict()

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    async def edit(self, caller_id: Any, task_id: Any, payload: TaskUpdate) -> dict:
        """Partially update a task. Owner only.

        Fields missing from the payload are left as they are. An explicit
        ``assignee_id: null`` removes the assignee.
        """
        caller = await self._require_user(caller_id)
        task = await self._require_task(task_id)
        self._authorize(TaskAction.EDIT, caller.id, task)

        updates = payload.model_dump(exclude_unset=True)

        rules = []
        if "title" in updates:
            rules.append(check_title(updates["title"], self.config.max_title_length))
        if "priority" in updates:
            rules.append(check_priority(updates["priority"]))
        if "checklist" in updates:
            rules.append(self._checklist_rule(updates["checklist"]))
        self._validate(*rules)

        assignee = task.assignee
        if "assignee_id" in updates:
            assignee_id = updates["assignee_id"]
            assignee = None
            if assignee_id is not None:
                assignee = await self._require_user(assignee_id, "Assigned user not found")

        before = task.member_ids()
        old = {"priority": task.priority, "status": task.status, "due_date": task.due_date}

        if "title" in updates:
            task.title = updates["title"].strip()
        if "priority" in updates:
            task.priority = Priority(updates["priority"]).value
        if "due_date" in updates:
            task.due_date = updates["due_date"]
        if "checklist" in updates:
            task.checklist = _checklist(payload.checklist)
        task.assignee = assignee
        task.assignee_id = assignee.id if assignee else None
        await self.session.flush()

        after = task.member_ids()
        await self._sync_members(task, before, after, old)

        logger.info("Task edited id=%s fields=%s", task.id, sorted(updates))
        return task.to_dict()

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, caller_id: Any, task_id: Any) -> None:
        """Delete a task and take it out of every member's counters. Owner only."""
        caller = await self._require_user(caller_id)
        task = await self._require_task(task_id)
        self._authorize(TaskAction.DELETE, caller.id, task)

        await self.memberships.remove_task(task.id)
        for user_id in task.member_ids():
            await self.analytics.remove_task(user_id, task)
        await self.tasks.delete(task.id)

        logger.info("Task deleted id=%s by %s", task_id, caller.id)

    # ------------------------------------------------------------------
    # Checklist
    # ------------------------------------------------------------------

    async def toggle_checklist_item(self, caller_id: Any, task_id: Any, index: int) -> dict:
        """Flip ``completed`` on one checklist item. No analytics effect."""
        task = await self._require_task(task_id)
        self._authorize(TaskAction.TOGGLE_CHECKLIST, caller_id, task)

        items = [dict(item) for item in task.checklist or []]
        if not 0 <= index < len(items):
            raise NotFound("Checklist item not found")

        items[index]["completed"] = not items[index].get("completed", False)
        task.checklist = items
        await self.session.flush()
        return task.to_dict()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def filter_by_window(
        self,
        caller_id: Any,
        window: Window | str = Window.THIS_WEEK,
        now: Optional[datetime] = None,
    ) -> list[dict]:
        """Tasks the caller owns or is assigned to, created in the window."""
        try:
            window = Window(window)
        except ValueError:
            raise InvalidInput(f"Invalid filter: {window}") from None

        user_id = coerce_uuid(caller_id)
        if user_id is None:
            return []

        windows = self.config.windows
        start, end = to_utc(window_bounds(
            window,
            now or self.clock(),
            tz=windows.timezone,
            week_start=windows.week_start,
        ))
        tasks = await self.tasks.find_in_window(user_id, start, end)
        return [task.to_dict() for task in tasks]

    async def get_shared(self, task_id: Any) -> dict:
        """Public read through a share link; no caller required."""
        task = await self._require_task(task_id)
        self._authorize(TaskAction.VIEW_SHARED, None, task)
        return task.to_dict()

    async def get_analytics(self, caller_id: Any) -> dict:
        user = await self._require_user(caller_id)
        return {
            "user": user.to_public(),
            "analytics": user.analytics(),
            "tasks": await self.memberships.task_ids(user.id),
        }

    async def reconcile_analytics(self, caller_id: Any) -> dict:
        """Recompute the caller's counters from their live task set."""
        user = await self._require_user(caller_id)
        drift = await self.analytics.reconcile(user.id)
        return {"analytics": user.analytics(), "corrected": drift}


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def get_task_service(session: AsyncSession = Depends(get_session)) -> TaskService:
    """FastAPI dependency for TaskService."""
    return TaskService(session)
