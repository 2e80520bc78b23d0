"""Enum-based workflow state machine for task status.

Defines task status as a Python enum with an explicit transition table.
The task board is free-form: every status is reachable from every other,
so the table only guards against values outside the enum. Who may move a
task is decided by the authorization rules, not here.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Task board columns."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def parse(cls, value: "str | TaskStatus | None") -> "TaskStatus | None":
        """Return the matching status, or None if the value is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed transitions: {current_state: [allowed_next_states]}
_TASK_TRANSITIONS: dict[TaskStatus, list[TaskStatus]] = {
    state: list(TaskStatus) for state in TaskStatus
}


def can_transition(from_state: TaskStatus, to_state: TaskStatus) -> bool:
    """Check if a transition is allowed from the current state."""
    return to_state in _TASK_TRANSITIONS.get(from_state, [])


# ---------------------------------------------------------------------------
# Transition record
# ---------------------------------------------------------------------------

@dataclass
class StatusTransition:
    """Record of a single status change."""

    task_id: str
    from_state: TaskStatus
    to_state: TaskStatus
    actor: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_noop(self) -> bool:
        return self.from_state == self.to_state


def transition(
    task_id: str,
    from_state: TaskStatus,
    to_state: TaskStatus,
    actor: str,
    metadata: dict[str, Any] | None = None,
) -> StatusTransition:
    """Validate and record a status transition.

    Raises ValueError if the transition is not allowed.
    """
    if not can_transition(from_state, to_state):
        allowed = [s.value for s in _TASK_TRANSITIONS.get(from_state, [])]
        raise ValueError(
            f"Cannot transition from {from_state.value} to {to_state.value}. "
            f"Allowed: {allowed}"
        )
    return StatusTransition(
        task_id=task_id,
        from_state=from_state,
        to_state=to_state,
        actor=actor,
        metadata=metadata or {},
    )
