"""Pydantic schemas for API request/response validation."""

from datetime import date
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from patterns.workflow_states import TaskStatus  # noqa: F401  re-exported


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Priority(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @classmethod
    def parse(cls, value: "str | Priority | None") -> "Priority | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Window(str, Enum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ChecklistItem(BaseModel):
    title: str = Field(..., min_length=1)
    completed: bool = False


class TaskCreate(BaseModel):
    title: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None
    assignee_id: Optional[UUID] = None
    checklist: list[ChecklistItem] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Partial edit. Fields left out of the request stay unchanged;
    ``assignee_id: null`` removes the assignee."""

    title: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None
    assignee_id: Optional[UUID] = None
    checklist: Optional[list[ChecklistItem]] = None


class StatusChange(BaseModel):
    task_id: UUID
    status: Optional[str] = None


class ChecklistToggle(BaseModel):
    task_id: UUID
    index: int


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ApiResponse(BaseModel):
    data: Any = None
    message: str = ""
