import pytest

from teamhub.core.enums import MilestoneStatus, Role
from teamhub.core.errors import AuthorizationError, ValidationError
from teamhub.schemas.milestones import MilestoneUpdate, MilestoneUpsert
from teamhub.services.milestones import ACTIVE_MILESTONE_ID, MilestoneService


@pytest.mark.asyncio
async def test_single_active_milestone_is_upserted(store, user_factory):
    root = await user_factory(Role.SUPER_ADMIN)
    service = MilestoneService(store)

    created = await service.upsert_active(root, MilestoneUpsert(title="Beta", deadline=1_000, progress=150))
    assert created.id == ACTIVE_MILESTONE_ID
    assert created.progress == 100

    updated = await service.upsert_active(root, MilestoneUpsert(title=" GA ", deadline=2_000))
    assert updated.id == ACTIVE_MILESTONE_ID
    assert updated.title == "GA"
    assert [m.id for m in await service.list()] == [ACTIVE_MILESTONE_ID]
    assert (await service.get_active()).title == "GA"


@pytest.mark.asyncio
async def test_only_super_admin_manages_single_milestone(store, user_factory):
    admin = await user_factory(Role.ADMIN)
    service = MilestoneService(store)

    with pytest.raises(AuthorizationError) as excinfo:
        await service.upsert_active(admin, MilestoneUpsert(title="Beta", deadline=1_000))
    assert excinfo.value.code == "error_milestone_forbidden"

    with pytest.raises(ValidationError):
        await service.upsert_active(admin, MilestoneUpsert(title="  ", deadline=1_000))


@pytest.mark.asyncio
async def test_completed_milestone_is_not_active(store, user_factory, active_milestone):
    root = await user_factory(Role.SUPER_ADMIN)
    service = MilestoneService(store)

    assert (await service.get_active()).id == active_milestone.id

    updated = await service.update(root, ACTIVE_MILESTONE_ID, MilestoneUpdate(status="completed", progress=-5))
    assert updated.status is MilestoneStatus.COMPLETED
    assert updated.progress == 0
    assert await service.get_active() is None


@pytest.mark.asyncio
async def test_team_milestones(store, user_factory, multi_team):
    blue_admin = await user_factory(Role.ADMIN, team_id="blue")
    red_admin = await user_factory(Role.ADMIN, team_id="red")
    blue_staff = await user_factory(Role.STAFF, team_id="blue")
    service = MilestoneService(store)

    milestone = await service.upsert_active(blue_admin, MilestoneUpsert(title="Sprint 1", deadline=1_000))
    assert milestone.team_id == "blue"
    assert milestone.id != ACTIVE_MILESTONE_ID

    with pytest.raises(AuthorizationError):
        await service.upsert_active(red_admin, MilestoneUpsert(title="Hijack", deadline=1_000, teamId="blue"))

    assert (await service.active_for(blue_staff)).id == milestone.id
    assert await service.active_for(red_admin) is None
    assert [m.id for m in await service.list("blue")] == [milestone.id]

    await service.remove(blue_admin, milestone.id)
    assert await service.get_active("blue") is None
