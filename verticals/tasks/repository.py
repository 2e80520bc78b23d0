"""Task repositories: async record store for users, tasks and memberships.

Extends BaseRepository with the queries the lifecycle needs: membership
add-to-set / pull, the owner-or-assignee window query, and per-user
aggregates used to reconcile analytics counters.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from patterns.repository import BaseRepository
from verticals.tasks.models.db_models import Task, TaskMembership, User

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


# ---------------------------------------------------------------------------
# User repository
# ---------------------------------------------------------------------------

class UserRepository(BaseRepository[User]):
    """Repository for users and their analytics counters."""

    model = User


# ---------------------------------------------------------------------------
# Task repository
# ---------------------------------------------------------------------------

class TaskRepository(BaseRepository[Task]):
    """Repository for task CRUD and window queries."""

    model = Task

    async def find_in_window(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Task]:
        """Tasks the user owns or is assigned to, created within [start, end]."""
        stmt = (
            select(Task)
            .where(
                or_(Task.owner_id == user_id, Task.assignee_id == user_id),
                Task.created_at >= start,
                Task.created_at <= end,
            )
            .order_by(Task.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def member_tasks(self, user_id: UUID) -> list[Task]:
        """Every task in the user's membership set."""
        stmt = (
            select(Task)
            .join(TaskMembership, TaskMembership.task_id == Task.id)
            .where(TaskMembership.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Membership repository
# ---------------------------------------------------------------------------

class MembershipRepository:
    """The ``User.tasks`` set, stored as (user_id, task_id) rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user_id: UUID, task_id: UUID) -> bool:
        """Add the task to the user's set. Returns False if already present.

        A single INSERT ... ON CONFLICT DO NOTHING, so two requests adding
        the same pair never collide on the primary key.
        """
        dialect = self.session.get_bind().dialect.name
        try:
            insert = _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"No add-to-set insert for dialect {dialect!r}") from None

        stmt = (
            insert(TaskMembership)
            .values(user_id=user_id, task_id=task_id)
            .on_conflict_do_nothing(index_elements=["user_id", "task_id"])
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def remove(self, user_id: UUID, task_id: UUID) -> bool:
        """Pull the task from the user's set. Returns False if it was absent."""
        stmt = delete(TaskMembership).where(
            and_(TaskMembership.user_id == user_id, TaskMembership.task_id == task_id)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def remove_task(self, task_id: UUID) -> int:
        """Pull the task from every user's set."""
        stmt = delete(TaskMembership).where(TaskMembership.task_id == task_id)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def task_ids(self, user_id: UUID) -> list[str]:
        stmt = select(TaskMembership.task_id).where(TaskMembership.user_id == user_id)
        result = await self.session.execute(stmt)
        return [str(task_id) for task_id in result.scalars().all()]
