from __future__ import annotations

from typing import List

from teamhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from teamhub.core.logging import logger
from teamhub.core.rbac import can_manage_teams
from teamhub.core.timeutil import now_millis
from teamhub.schemas.teams import TeamCreate, TeamRead, TeamUpdate
from teamhub.schemas.users import UserRead

from .base import ServiceBase


class TeamService(ServiceBase):
    """Teams and their membership.

    ``Team.members`` and ``User.teamId`` are written one after the other, not
    atomically; a failure in between leaves them to be reconciled by a retry.
    """

    async def create_team(self, actor: UserRead, payload: TeamCreate) -> TeamRead:
        self._require_manager(actor)
        name = payload.name.strip()
        if not name:
            raise ValidationError("error_team_name_required", "Team name is required", field="name")
        for uid in payload.members:
            await self._get_user(uid)
        team = await self.store.create(
            "teams",
            {"name": name, "created_by": actor.uid, "members": [], "created_at": now_millis()},
        )
        logger.info("team.created", team_id=team.id, name=name)
        for uid in payload.members:
            team = await self._attach(team, uid)
        return team

    async def list(self) -> List[TeamRead]:
        teams = await self.store.list("teams")
        logger.debug("team.list", count=len(teams))
        return teams

    async def get(self, team_id: str) -> TeamRead:
        team = await self.store.get("teams", team_id)
        if team is None:
            raise NotFoundError("error_team_not_found", f"Team {team_id} not found")
        return team

    async def update_team(self, actor: UserRead, team_id: str, payload: TeamUpdate) -> TeamRead:
        self._require_manager(actor)
        await self.get(team_id)
        if payload.name is None:
            return await self.get(team_id)
        name = payload.name.strip()
        if not name:
            raise ValidationError("error_team_name_required", "Team name is required", field="name")
        team = await self.store.update("teams", team_id, {"name": name})
        logger.info("team.updated", team_id=team_id, name=name)
        return team

    async def add_member(self, actor: UserRead, team_id: str, uid: str) -> TeamRead:
        self._require_manager(actor)
        team = await self.get(team_id)
        return await self._attach(team, uid)

    async def remove_member(self, actor: UserRead, team_id: str, uid: str) -> TeamRead:
        self._require_manager(actor)
        team = await self.get(team_id)
        user = await self._get_user(uid)
        if uid in team.members:
            team = await self.store.update(
                "teams", team_id, {"members": [member for member in team.members if member != uid]}
            )
        if user.team_id == team_id:
            await self.store.update("users", uid, {"team_id": None})
        logger.info("team.member_removed", team_id=team_id, user_id=uid)
        return team

    async def list_members(self, team_id: str) -> List[UserRead]:
        await self.get(team_id)
        members = await self.store.query("users", "teamId", "==", team_id)
        logger.debug("team.members_listed", team_id=team_id, count=len(members))
        return members

    async def _attach(self, team: TeamRead, uid: str) -> TeamRead:
        user = await self._get_user(uid)
        if user.team_id and user.team_id != team.id:
            previous = await self.store.get("teams", user.team_id)
            if previous is not None and uid in previous.members:
                await self.store.update(
                    "teams", previous.id, {"members": [member for member in previous.members if member != uid]}
                )
        if uid not in team.members:
            team = await self.store.update("teams", team.id, {"members": [*team.members, uid]})
        if user.team_id != team.id:
            await self.store.update("users", uid, {"team_id": team.id})
        logger.info("team.member_added", team_id=team.id, user_id=uid)
        return team

    async def _get_user(self, uid: str) -> UserRead:
        user = await self.store.get("users", uid)
        if user is None:
            raise NotFoundError("error_user_not_found", f"User {uid} not found")
        return user

    @staticmethod
    def _require_manager(actor: UserRead) -> None:
        if not can_manage_teams(actor.role):
            raise AuthorizationError("error_team_forbidden", "Only super_admin and admin can manage teams")
