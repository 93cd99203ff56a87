from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from teamhub.core.errors import NotFoundError
from teamhub.schemas.milestones import MilestoneRead, MilestoneUpdate, MilestoneUpsert
from teamhub.schemas.users import UserRead
from teamhub.services.milestones import MilestoneService

from .deps import get_current_user, provide_service

router = APIRouter(prefix="/api/milestones", tags=["milestones"])


@router.get("/", response_model=list[MilestoneRead])
async def list_milestones(
    team_id: str | None = Query(default=None, alias="teamId"),
    _: UserRead = Depends(get_current_user),
    service: MilestoneService = Depends(provide_service(MilestoneService)),
) -> list[MilestoneRead]:
    return await service.list(team_id)


@router.get("/active", response_model=MilestoneRead)
async def read_active(
    user: UserRead = Depends(get_current_user),
    service: MilestoneService = Depends(provide_service(MilestoneService)),
) -> MilestoneRead:
    milestone = await service.active_for(user)
    if milestone is None:
        raise NotFoundError("error_no_active_milestone", "No active milestone is configured.")
    return milestone


@router.put("/active", response_model=MilestoneRead)
async def upsert_active(
    payload: MilestoneUpsert,
    user: UserRead = Depends(get_current_user),
    service: MilestoneService = Depends(provide_service(MilestoneService)),
) -> MilestoneRead:
    return await service.upsert_active(user, payload)


@router.patch("/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    milestone_id: str,
    payload: MilestoneUpdate,
    user: UserRead = Depends(get_current_user),
    service: MilestoneService = Depends(provide_service(MilestoneService)),
) -> MilestoneRead:
    return await service.update(user, milestone_id, payload)


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    milestone_id: str,
    user: UserRead = Depends(get_current_user),
    service: MilestoneService = Depends(provide_service(MilestoneService)),
) -> None:
    await service.remove(user, milestone_id)
    return None
