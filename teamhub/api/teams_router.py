from __future__ import annotations

from fastapi import APIRouter, Depends, status

from teamhub.core.enums import Role
from teamhub.schemas.teams import TeamCreate, TeamRead, TeamUpdate
from teamhub.schemas.users import UserRead
from teamhub.services.teams import TeamService

from .deps import provide_service, require_roles

router = APIRouter(prefix="/api/teams", tags=["teams"])

_managers = require_roles(Role.SUPER_ADMIN, Role.ADMIN)


@router.get("/", response_model=list[TeamRead])
async def list_teams(
    _: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> list[TeamRead]:
    return await service.list()


@router.post("/", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
async def create_team(
    payload: TeamCreate,
    user: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> TeamRead:
    return await service.create_team(user, payload)


@router.patch("/{team_id}", response_model=TeamRead)
async def update_team(
    team_id: str,
    payload: TeamUpdate,
    user: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> TeamRead:
    return await service.update_team(user, team_id, payload)


@router.get("/{team_id}/members", response_model=list[UserRead])
async def list_members(
    team_id: str,
    _: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> list[UserRead]:
    return await service.list_members(team_id)


@router.post("/{team_id}/members/{uid}", response_model=TeamRead)
async def add_member(
    team_id: str,
    uid: str,
    user: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> TeamRead:
    return await service.add_member(user, team_id, uid)


@router.delete("/{team_id}/members/{uid}", response_model=TeamRead)
async def remove_member(
    team_id: str,
    uid: str,
    user: UserRead = Depends(_managers),
    service: TeamService = Depends(provide_service(TeamService)),
) -> TeamRead:
    return await service.remove_member(user, team_id, uid)
