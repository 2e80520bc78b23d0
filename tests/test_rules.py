"""Test authorization policy, payload rules and the status workflow."""
import uuid

import pytest

from patterns.workflow_states import TaskStatus, can_transition, transition
from verticals.tasks.rules import (
    Relation,
    TaskAction,
    build_policy,
    check_checklist,
    check_permission,
    check_priority,
    check_status,
    check_title,
    evaluate_rules,
    relations_of,
)

OWNER = uuid.uuid4()
ASSIGNEE = uuid.uuid4()
STRANGER = uuid.uuid4()


def test_status_change_owner_and_assignee():
    assert check_permission(TaskAction.CHANGE_STATUS, OWNER, OWNER, ASSIGNEE).passed
    assert check_permission(TaskAction.CHANGE_STATUS, ASSIGNEE, OWNER, ASSIGNEE).passed


def test_status_change_stranger_rejected():
    result = check_permission(TaskAction.CHANGE_STATUS, STRANGER, OWNER, ASSIGNEE)
    assert not result.passed
    assert "not authorized" in result.message


@pytest.mark.parametrize("action", [TaskAction.EDIT, TaskAction.DELETE])
def test_edit_and_delete_owner_only(action):
    assert check_permission(action, OWNER, OWNER, ASSIGNEE).passed
    assert not check_permission(action, ASSIGNEE, OWNER, ASSIGNEE).passed
    assert not check_permission(action, STRANGER, OWNER, ASSIGNEE).passed


def test_unassigned_task_only_owner_changes_status():
    assert check_permission(TaskAction.CHANGE_STATUS, OWNER, OWNER, None).passed
    assert not check_permission(TaskAction.CHANGE_STATUS, ASSIGNEE, OWNER, None).passed


def test_checklist_toggle_open_by_default():
    assert check_permission(TaskAction.TOGGLE_CHECKLIST, STRANGER, OWNER, ASSIGNEE).passed


def test_checklist_toggle_restricted_policy():
    policy = build_policy(restrict_checklist_toggle=True)
    assert check_permission(TaskAction.TOGGLE_CHECKLIST, ASSIGNEE, OWNER, ASSIGNEE, policy).passed
    assert not check_permission(TaskAction.TOGGLE_CHECKLIST, STRANGER, OWNER, ASSIGNEE, policy).passed


def test_relations_of_self_assigned():
    held = relations_of(OWNER, OWNER, OWNER)
    assert held == {Relation.ANYONE, Relation.OWNER, Relation.ASSIGNEE}


def test_title_rule():
    assert not check_title("").passed
    assert not check_title("   ").passed
    assert not check_title(None).passed
    assert not check_title("x" * 201).passed
    assert check_title("Write report").passed


def test_priority_rule():
    assert check_priority("high").passed
    assert not check_priority("").passed
    assert check_priority("urgent").message == "Invalid priority: urgent"


def test_status_rule():
    assert check_status("in_progress").passed
    assert not check_status(None).passed
    assert check_status("archived").message == "Invalid status"


def test_checklist_rule():
    assert not check_checklist([]).passed
    assert not check_checklist(None).passed
    assert check_checklist([{"title": "a"}]).passed
    assert not check_checklist([{"title": "a"}] * 3, max_items=2).passed
    assert not check_checklist([{"title": "abcdef"}], max_title_length=5).passed
    assert check_checklist([{"title": "abcde"}], max_title_length=5).passed


def test_evaluate_rules_first_failure():
    result = evaluate_rules(check_title("ok"), check_priority(""), check_status(""))
    assert not result.all_passed
    assert len(result.failed) == 2
    assert result.first_failure.message == "Priority is required"


def test_every_status_reachable():
    for a in TaskStatus:
        for b in TaskStatus:
            assert can_transition(a, b)


def test_transition_record():
    record = transition("t1", TaskStatus.TODO, TaskStatus.DONE, actor="u1")
    assert record.from_state is TaskStatus.TODO
    assert record.to_state is TaskStatus.DONE
    assert not record.is_noop
    assert transition("t1", TaskStatus.DONE, TaskStatus.DONE, actor="u1").is_noop


def test_status_parse():
    assert TaskStatus.parse("done") is TaskStatus.DONE
    assert TaskStatus.parse("Done") is None
    assert TaskStatus.parse(None) is None
