from __future__ import annotations

from typing import List

from teamhub.core.enums import CommentType, Role, TaskStatus
from teamhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from teamhub.core.lifecycle import (
    can_access_task,
    can_delete_task,
    can_update_task_status,
    transition,
    validate_new_task,
)
from teamhub.core.logging import logger
from teamhub.core.rbac import coerce_role
from teamhub.core.settings import settings
from teamhub.core.timeutil import now_millis
from teamhub.core.visibility import partition
from teamhub.schemas.milestones import MilestoneRead
from teamhub.schemas.tasks import CommentRead, TaskBoard, TaskCreate, TaskRead
from teamhub.schemas.users import UserRead

from .base import ServiceBase
from .milestones import MilestoneService


class TaskService(ServiceBase):
    def __init__(self, store, identity=None) -> None:
        super().__init__(store, identity)
        self._milestones = MilestoneService(store)

    async def board(self, viewer: UserRead) -> TaskBoard:
        tasks = await self.store.list("tasks")
        users = await self.store.list("users")
        board = partition(tasks, viewer, users)
        logger.debug("task.board", uid=viewer.uid, mine=len(board.mine), subordinates=len(board.subordinates))
        return board

    async def get(self, task_id: str) -> TaskRead:
        task = await self.store.get("tasks", task_id)
        if task is None:
            raise NotFoundError("error_task_not_found", f"Task {task_id} not found")
        return task

    async def get_for(self, actor: UserRead, task_id: str) -> TaskRead:
        task = await self.get(task_id)
        if not can_access_task(actor, task, await self.store.list("users")):
            raise AuthorizationError("error_task_forbidden", "You do not have access to this task")
        return task

    async def create_task(self, actor: UserRead, payload: TaskCreate) -> TaskRead:
        milestone = await self._milestone_for(actor, payload)
        pool = await self.store.list("users")
        if settings.multi_team and milestone is not None and milestone.team_id is not None:
            pool = [user for user in pool if user.team_id == milestone.team_id]
        record = validate_new_task(actor, payload, milestone, pool)
        task = await self.store.create("tasks", record)
        logger.info(
            "task.created",
            task_id=task.id,
            milestone_id=task.milestone_id,
            assigned_role=task.assigned_role.value if task.assigned_role else None,
            assignees=len(task.assigned_user_ids),
        )
        return task

    async def _milestone_for(self, actor: UserRead, payload: TaskCreate) -> MilestoneRead | None:
        """Milestone a new task anchors to.

        With per-team milestones a named milestone is loaded directly; super
        admins may use any team's, everyone else only their own team's.
        """

        if not settings.multi_team or not payload.milestone_id:
            return await self._milestones.active_for(actor)
        milestone = await self.store.get("milestones", payload.milestone_id)
        if milestone is None:
            return None
        if coerce_role(actor.role) is not Role.SUPER_ADMIN and (
            actor.team_id is None or actor.team_id != milestone.team_id
        ):
            raise AuthorizationError("error_milestone_forbidden", "You cannot add tasks to another team's milestone")
        return milestone

    async def change_status(
        self,
        actor: UserRead,
        task_id: str,
        status: TaskStatus,
        block_reason: str | None = None,
    ) -> TaskRead:
        task = await self.get(task_id)
        if not can_update_task_status(actor, task, await self.store.list("users")):
            raise AuthorizationError("error_task_forbidden", "You are not allowed to update this task")
        changes = transition(task, actor, status, block_reason)
        updated = await self.store.update("tasks", task_id, changes)

        message = f"Status changed from {task.status.value} to {updated.status.value}"
        if updated.block_reason:
            message = f"{message}: {updated.block_reason}"
        await self._append_comment(actor, task_id, message, CommentType.SYSTEM_LOG)
        logger.info(
            "task.status_changed",
            task_id=task_id,
            old_status=task.status.value,
            new_status=updated.status.value,
        )
        return updated

    async def delete_task(self, actor: UserRead, task_id: str) -> None:
        task = await self.get(task_id)
        if not can_delete_task(actor, task):
            raise AuthorizationError("error_task_delete_forbidden", "You are not allowed to delete this task.")
        await self.store.remove("tasks", task_id)
        # Comments stay behind; cleaning them up is the caller's job.
        logger.info("task.deleted", task_id=task_id, deleted_by=actor.uid)

    async def add_comment(self, actor: UserRead, task_id: str, text: str) -> CommentRead:
        await self.get_for(actor, task_id)
        body = text.strip()
        if not body:
            raise ValidationError("error_comment_required", "Comment text is required", field="text")
        comment = await self._append_comment(actor, task_id, body, CommentType.COMMENT)
        logger.info("task.commented", task_id=task_id, comment_id=comment.id)
        return comment

    async def list_comments(self, actor: UserRead, task_id: str) -> List[CommentRead]:
        await self.get_for(actor, task_id)
        return await self.store.query("comments", "taskId", "==", task_id)

    async def _append_comment(
        self, actor: UserRead, task_id: str, text: str, kind: CommentType
    ) -> CommentRead:
        return await self.store.create(
            "comments",
            {
                "task_id": task_id,
                "user_id": actor.uid,
                "user_name": actor.label,
                "user_role": actor.role,
                "text": text,
                "timestamp": now_millis(),
                "type": kind,
            },
        )
