"""Test the membership set and atomic counter updates."""
from uuid import UUID

import pytest

from verticals.tasks.models.schemas import TaskCreate
from verticals.tasks.repository import MembershipRepository, UserRepository
from verticals.tasks.service import TaskService


def _task() -> TaskCreate:
    return TaskCreate(title="Plan offsite", priority="low", status="backlog", checklist=[{"title": "venue"}])


@pytest.mark.asyncio
async def test_add_is_idempotent(session, service, owner, assignee):
    task = await service.create(owner.id, _task())
    memberships = MembershipRepository(session)

    assert await memberships.add(assignee.id, UUID(task["id"])) is True
    assert await memberships.add(assignee.id, UUID(task["id"])) is False
    assert await memberships.task_ids(assignee.id) == [task["id"]]


@pytest.mark.asyncio
async def test_add_from_a_second_session_does_not_collide(session_factory, clock):
    async with session_factory() as first:
        owner = await UserRepository(first).create({"name": "Olivia", "email": "olivia@example.com"})
        task = await TaskService(first, clock=clock).create(owner.id, _task())
        await first.commit()

    async with session_factory() as second:
        added = await MembershipRepository(second).add(owner.id, UUID(task["id"]))
        await second.commit()

    assert added is False


@pytest.mark.asyncio
async def test_remove_task_clears_every_member(session, service, owner, assignee):
    task = await service.create(owner.id, _task().model_copy(update={"assignee_id": assignee.id}))
    memberships = MembershipRepository(session)

    assert await memberships.remove_task(UUID(task["id"])) == 2
    assert await memberships.task_ids(owner.id) == []
    assert await memberships.remove(assignee.id, UUID(task["id"])) is False


@pytest.mark.asyncio
async def test_increment_refreshes_loaded_user(session, owner):
    users = UserRepository(session)
    assert await users.increment(owner.id, {"todo_tasks": 2, "done_tasks": 1}) is True
    assert await users.increment(owner.id, {"todo_tasks": -1}) is True
    assert owner.todo_tasks == 1
    assert owner.done_tasks == 1
