from __future__ import annotations

from typing import List

from teamhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from teamhub.core.logging import logger
from teamhub.core.rbac import can_manage_milestone
from teamhub.core.settings import settings
from teamhub.core.timeutil import now_millis
from teamhub.schemas.milestones import MilestoneRead, MilestoneUpdate, MilestoneUpsert
from teamhub.schemas.users import UserRead

from .base import ServiceBase

ACTIVE_MILESTONE_ID = "active"


class MilestoneService(ServiceBase):
    """Milestones tasks are anchored to.

    In single-tenant mode there is one global milestone stored under a fixed
    id. With per-team tenancy every team owns its own milestones and the most
    recently updated open one is the team's active milestone.
    """

    async def get(self, milestone_id: str) -> MilestoneRead:
        milestone = await self.store.get("milestones", milestone_id)
        if milestone is None:
            raise NotFoundError("error_milestone_not_found", f"Milestone {milestone_id} not found")
        return milestone

    async def get_active(self, team_id: str | None = None) -> MilestoneRead | None:
        if not settings.multi_team:
            milestone = await self.store.get("milestones", ACTIVE_MILESTONE_ID)
            return milestone if milestone is not None and milestone.is_open else None
        if team_id is None:
            return None
        candidates = [
            milestone
            for milestone in await self.store.query("milestones", "teamId", "==", team_id)
            if milestone.is_open
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda milestone: milestone.updated_at)

    async def active_for(self, actor: UserRead) -> MilestoneRead | None:
        return await self.get_active(actor.team_id)

    async def list(self, team_id: str | None = None) -> List[MilestoneRead]:
        if not settings.multi_team:
            active = await self.store.get("milestones", ACTIVE_MILESTONE_ID)
            return [active] if active is not None else []
        if team_id is not None:
            return await self.store.query("milestones", "teamId", "==", team_id)
        return await self.store.list("milestones")

    async def upsert_active(self, actor: UserRead, payload: MilestoneUpsert) -> MilestoneRead:
        title = payload.title.strip()
        if not title:
            raise ValidationError("error_title_required", "Title is required", field="title")
        now = now_millis()
        record = {
            "title": title,
            "deadline": payload.deadline,
            "status": payload.status,
            "progress": payload.progress,
            "created_by": actor.uid,
            "created_by_name": actor.label,
            "updated_at": now,
        }

        if settings.multi_team:
            team_id = payload.team_id or actor.team_id
            if team_id is None:
                raise ValidationError("error_team_required", "A team is required", field="teamId")
            if not can_manage_milestone(actor, team_id):
                raise AuthorizationError("error_milestone_forbidden", "You cannot manage this team's milestones")
            milestone = await self.store.create("milestones", {**record, "team_id": team_id, "created_at": now})
            logger.info("milestone.created", milestone_id=milestone.id, team_id=team_id)
            return milestone

        if not can_manage_milestone(actor):
            raise AuthorizationError("error_milestone_forbidden", "Only super_admin can manage the active milestone")
        existing = await self.store.get("milestones", ACTIVE_MILESTONE_ID)
        if existing is None:
            milestone = await self.store.create("milestones", {**record, "created_at": now}, id=ACTIVE_MILESTONE_ID)
        else:
            milestone = await self.store.update("milestones", ACTIVE_MILESTONE_ID, record)
        logger.info("milestone.upserted", milestone_id=milestone.id, progress=milestone.progress)
        return milestone

    async def update(self, actor: UserRead, milestone_id: str, payload: MilestoneUpdate) -> MilestoneRead:
        milestone = await self.get(milestone_id)
        if not can_manage_milestone(actor, milestone.team_id):
            raise AuthorizationError("error_milestone_forbidden", "You cannot manage this milestone")
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ValidationError("error_title_required", "Title is required", field="title")
        changes["updated_at"] = now_millis()
        updated = await self.store.update("milestones", milestone_id, changes)
        logger.info("milestone.updated", milestone_id=milestone_id, fields=sorted(changes))
        return updated

    async def remove(self, actor: UserRead, milestone_id: str) -> None:
        milestone = await self.get(milestone_id)
        if not can_manage_milestone(actor, milestone.team_id):
            raise AuthorizationError("error_milestone_forbidden", "You cannot manage this milestone")
        await self.store.remove("milestones", milestone_id)
        logger.info("milestone.removed", milestone_id=milestone_id)
