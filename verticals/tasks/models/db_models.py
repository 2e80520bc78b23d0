"""SQLAlchemy models for the task vertical.

Users carry denormalized analytics counters; tasks reference their owner
and optional assignee; task_memberships holds the set of task ids each
user owns or is assigned to. The to_dict() methods provide the standard
serialisation interface used by the service and router.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.models.base import Base, RecordMixin


ANALYTICS_COLUMNS = (
    "low_priority_tasks",
    "moderate_priority_tasks",
    "high_priority_tasks",
    "backlog_tasks",
    "todo_tasks",
    "in_progress_tasks",
    "done_tasks",
    "due_date_tasks",
)


def _counter() -> Mapped[int]:
    return mapped_column(Integer, nullable=False, default=0, server_default="0")


class User(RecordMixin, Base):
    """A collaborator who owns or is assigned tasks."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)

    low_priority_tasks: Mapped[int] = _counter()
    moderate_priority_tasks: Mapped[int] = _counter()
    high_priority_tasks: Mapped[int] = _counter()
    backlog_tasks: Mapped[int] = _counter()
    todo_tasks: Mapped[int] = _counter()
    in_progress_tasks: Mapped[int] = _counter()
    done_tasks: Mapped[int] = _counter()
    due_date_tasks: Mapped[int] = _counter()

    def analytics(self) -> dict[str, int]:
        return {name: getattr(self, name) or 0 for name in ANALYTICS_COLUMNS}

    def to_public(self) -> dict:
        """Identity fields safe to embed in another user's view."""
        return {"id": str(self.id), "name": self.name, "email": self.email}

    def to_dict(self) -> dict:
        return {
            **self.to_public(),
            "analytics": self.analytics(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Task(RecordMixin, Base):
    """A unit of work on the board."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    checklist: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    assignee_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True
    )

    owner: Mapped["User"] = relationship(foreign_keys=[owner_id], lazy="selectin")
    assignee: Mapped[Optional["User"]] = relationship(foreign_keys=[assignee_id], lazy="selectin")

    def member_ids(self) -> set[uuid.UUID]:
        """Distinct users whose membership and counters include this task."""
        members = {self.owner_id}
        if self.assignee_id is not None:
            members.add(self.assignee_id)
        return members

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "priority": self.priority,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "checklist": [dict(item) for item in self.checklist or []],
            "owner": self.owner.to_public() if self.owner else {"id": str(self.owner_id)},
            "assignee": self.assignee.to_public() if self.assignee else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class TaskMembership(Base):
    """One row per (user, task) pair in the user's task set."""

    __tablename__ = "task_memberships"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True
    )
