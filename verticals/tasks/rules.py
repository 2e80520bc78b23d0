"""Task business rules: pure functions.

Authorization is a capability table: each ``TaskAction`` maps to the set
of relationships (owner, assignee, anyone) allowed to perform it. Payload
checks follow the same RuleResult shape so the service can compose them
with ``evaluate_rules``.
"""

from enum import Enum
from typing import Any, Iterable, Optional
from uuid import UUID

from patterns.rules_engine import RuleResult, RuleSetResult, evaluate_rules
from patterns.workflow_states import TaskStatus
from verticals.tasks.models.schemas import Priority


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------

class TaskAction(str, Enum):
    CHANGE_STATUS = "change_status"
    EDIT = "edit"
    DELETE = "delete"
    TOGGLE_CHECKLIST = "toggle_checklist"
    VIEW_SHARED = "view_shared"


class Relation(str, Enum):
    OWNER = "owner"
    ASSIGNEE = "assignee"
    ANYONE = "anyone"


POLICY: dict[TaskAction, frozenset[Relation]] = {
    TaskAction.CHANGE_STATUS: frozenset({Relation.OWNER, Relation.ASSIGNEE}),
    TaskAction.EDIT: frozenset({Relation.OWNER}),
    TaskAction.DELETE: frozenset({Relation.OWNER}),
    TaskAction.TOGGLE_CHECKLIST: frozenset({Relation.ANYONE}),
    TaskAction.VIEW_SHARED: frozenset({Relation.ANYONE}),
}

RESTRICTED_CHECKLIST_POLICY = frozenset({Relation.OWNER, Relation.ASSIGNEE})


def relations_of(
    caller_id: UUID, owner_id: UUID, assignee_id: Optional[UUID]
) -> set[Relation]:
    """Relationships the caller holds to a task."""
    relations = {Relation.ANYONE}
    if caller_id == owner_id:
        relations.add(Relation.OWNER)
    if assignee_id is not None and caller_id == assignee_id:
        relations.add(Relation.ASSIGNEE)
    return relations


def check_permission(
    action: TaskAction,
    caller_id: UUID,
    owner_id: UUID,
    assignee_id: Optional[UUID] = None,
    policy: Optional[dict[TaskAction, frozenset[Relation]]] = None,
) -> RuleResult:
    """May ``caller_id`` perform ``action`` on a task with this owner/assignee?"""
    allowed = (policy or POLICY)[action]
    held = relations_of(caller_id, owner_id, assignee_id)
    passed = bool(allowed & held)

    return RuleResult(
        passed=passed,
        rule_name=f"permission:{action.value}",
        message=(
            "Permitted"
            if passed
            else f"You are not authorized to {action.value.replace('_', ' ')} this task"
        ),
        details={
            "allowed": sorted(r.value for r in allowed),
            "held": sorted(r.value for r in held),
        },
    )


def build_policy(restrict_checklist_toggle: bool = False) -> dict[TaskAction, frozenset[Relation]]:
    policy = dict(POLICY)
    if restrict_checklist_toggle:
        policy[TaskAction.TOGGLE_CHECKLIST] = RESTRICTED_CHECKLIST_POLICY
    return policy


# ---------------------------------------------------------------------------
# Payload rules
# ---------------------------------------------------------------------------

def check_title(title: Optional[str], max_length: int = 200) -> RuleResult:
    cleaned = (title or "").strip()
    if not cleaned:
        return RuleResult(False, "title", "Title is required")
    if len(cleaned) > max_length:
        return RuleResult(False, "title", f"Title exceeds {max_length} characters")
    return RuleResult(True, "title", "ok")


def check_priority(priority: Any) -> RuleResult:
    if priority in (None, ""):
        return RuleResult(False, "priority", "Priority is required")
    if Priority.parse(priority) is None:
        return RuleResult(
            False, "priority", f"Invalid priority: {priority}",
            details={"allowed": [p.value for p in Priority]},
        )
    return RuleResult(True, "priority", "ok")


def check_status(status: Any) -> RuleResult:
    if status in (None, ""):
        return RuleResult(False, "status", "Status is required")
    if TaskStatus.parse(status) is None:
        return RuleResult(
            False, "status", "Invalid status",
            details={"allowed": [s.value for s in TaskStatus]},
        )
    return RuleResult(True, "status", "ok")


def check_checklist(
    items: Optional[Iterable[Any]],
    min_items: int = 1,
    max_items: int = 100,
    max_title_length: int = 200,
) -> RuleResult:
    items = list(items or [])
    count = len(items)
    if count < min_items:
        return RuleResult(False, "checklist", f"At least {min_items} checklist item is required")
    if count > max_items:
        return RuleResult(False, "checklist", f"Checklist exceeds {max_items} items")
    for item in items:
        title = item.get("title") if isinstance(item, dict) else getattr(item, "title", None)
        if len(title or "") > max_title_length:
            return RuleResult(
                False, "checklist",
                f"Checklist item title exceeds {max_title_length} characters",
            )
    return RuleResult(True, "checklist", "ok", details={"count": count})


__all__ = [
    "POLICY",
    "Relation",
    "RuleResult",
    "RuleSetResult",
    "TaskAction",
    "build_policy",
    "check_checklist",
    "check_permission",
    "check_priority",
    "check_status",
    "check_title",
    "evaluate_rules",
    "relations_of",
]
