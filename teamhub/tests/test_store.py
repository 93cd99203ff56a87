import asyncio

import pytest

from teamhub.core.enums import Role, TaskStatus
from teamhub.core.errors import NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_create_normalizes_records(store):
    task = await store.create(
        "tasks",
        {"title": "Draft", "milestoneId": "active", "blockReason": "  ", "assignedUserIds": ["a", "", None]},
    )

    assert task.id
    assert task.block_reason is None
    assert task.assigned_user_ids == ["a"]
    assert task.status is TaskStatus.TODO
    assert task.assigned_by_role is Role.TRIAL_STAFF

    stored = await store.get("tasks", task.id)
    assert stored == task
    assert stored.to_document()["assignedUserIds"] == ["a"]


@pytest.mark.asyncio
async def test_milestone_progress_is_clamped(store):
    milestone = await store.create("milestones", {"title": "M", "deadline": 5, "progress": 250}, id="active")
    assert milestone.progress == 100

    milestone = await store.update("milestones", "active", {"progress": -3})
    assert milestone.progress == 0


@pytest.mark.asyncio
async def test_query_operators(store):
    for n, due in enumerate([100, 200, 300]):
        await store.create("tasks", {"title": f"T{n}", "dueAt": due, "assignedUserIds": [f"u{n}", "shared"]})

    assert sorted(t.title for t in await store.query("tasks", "dueAt", ">=", 200)) == ["T1", "T2"]
    assert sorted(t.title for t in await store.query("tasks", "title", "in", ["T0", "T2"])) == ["T0", "T2"]
    assert len(await store.query("tasks", "assignedUserIds", "array-contains", "shared")) == 3
    assert [t.title for t in await store.query("tasks", "assigned_user_ids", "array-contains", "u1")] == ["T1"]

    with pytest.raises(ValidationError):
        await store.query("tasks", "dueAt", "~", 1)
    with pytest.raises(ValidationError):
        await store.query("tasks", "color", "==", "red")


@pytest.mark.asyncio
async def test_update_and_remove_missing_records(store):
    assert await store.get("teams", "nope") is None

    with pytest.raises(NotFoundError) as excinfo:
        await store.update("teams", "nope", {"name": "x"})
    assert excinfo.value.code == "error_teams_not_found"

    with pytest.raises(NotFoundError):
        await store.remove("teams", "nope")


@pytest.mark.asyncio
async def test_invalid_records_are_rejected(store):
    with pytest.raises(ValidationError) as excinfo:
        await store.create("users", {"email": "x@example.com", "role": "overlord"}, id="x")
    assert excinfo.value.code == "error_invalid_record"

    with pytest.raises(ValidationError):
        await store.list("projects")


@pytest.mark.asyncio
async def test_subscribe_emits_snapshots(store):
    stream = store.subscribe("teams")
    try:
        assert await stream.__anext__() == []

        team = await store.create("teams", {"name": "Blue"})
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert [t.id for t in snapshot] == [team.id]

        await store.remove("teams", team.id)
        assert await asyncio.wait_for(stream.__anext__(), timeout=1) == []
    finally:
        await stream.aclose()

    assert store.hub.has_subscribers("teams") is False


@pytest.mark.asyncio
async def test_lagging_subscriber_gets_latest_snapshot(store):
    stream = store.subscribe("teams")
    try:
        assert await stream.__anext__() == []

        await store.create("teams", {"name": "Blue"})
        await store.create("teams", {"name": "Red"})
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)

        assert sorted(t.name for t in snapshot) == ["Blue", "Red"]
    finally:
        await stream.aclose()
