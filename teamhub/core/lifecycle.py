"""Task lifecycle rules: creation preconditions, status transitions and deletion.

The functions here validate and compute changes; they return plain partial
documents and leave persistence to the task service.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from teamhub.schemas.milestones import MilestoneRead
from teamhub.schemas.tasks import TaskCreate, TaskRead
from teamhub.schemas.users import UserRead

from .enums import TaskStatus
from .errors import AuthorizationError, ValidationError
from .rbac import assignable_roles, assignable_users, can_create_task, coerce_role, rank
from .timeutil import now_millis
from .visibility import index_users, is_mine, is_subordinate_task


def is_assigner(actor: Optional[UserRead], task: TaskRead) -> bool:
    return actor is not None and task.assigned_by_id is not None and task.assigned_by_id == actor.uid


def can_access_task(
    actor: Optional[UserRead],
    task: TaskRead,
    users: Iterable[UserRead],
) -> bool:
    """Assignees, the assigner, anyone at or above the assigner's rank, and
    supervisors of an assignee may open a task and move its status."""

    if actor is None:
        return False
    if is_mine(task, actor) or is_assigner(actor, task):
        return True
    if rank(actor.role) >= rank(task.assigned_by_role):
        return True
    return is_subordinate_task(task, actor, index_users(users))


can_update_task_status = can_access_task


def can_complete_task(actor: Optional[UserRead], task: TaskRead) -> bool:
    """Only the assigner's exact role may close a task, not merely a higher one."""

    return actor is not None and coerce_role(actor.role) == task.assigned_by_role


def can_delete_task(actor: Optional[UserRead], task: TaskRead) -> bool:
    if actor is None:
        return False
    return is_assigner(actor, task) or rank(actor.role) >= rank(task.assigned_by_role)


def transition(
    task: TaskRead,
    actor: Optional[UserRead],
    new_status: TaskStatus | str,
    block_reason: str | None = None,
) -> Dict[str, Any]:
    """Validate a status change and return the fields to write.

    Blocking needs a non-blank reason. Every other target status clears the
    reason. Raises before anything is written.
    """

    try:
        status = TaskStatus(new_status)
    except ValueError:
        raise ValidationError("error_invalid_status", f"Unknown task status: {new_status}", field="status") from None

    if status is TaskStatus.BLOCKED:
        reason = (block_reason or "").strip()
        if not reason:
            raise ValidationError("error_block_reason_required", "Block reason is required", field="blockReason")
        return {"status": status, "block_reason": reason}

    if status is TaskStatus.DONE and not can_complete_task(actor, task):
        raise AuthorizationError(
            "error_done_requires_assigner_role",
            f"Only {task.assigned_by_role.value} rank can mark this task as done.",
            field="status",
        )
    return {"status": status, "block_reason": None}


def validate_new_task(
    actor: Optional[UserRead],
    draft: TaskCreate,
    milestone: Optional[MilestoneRead],
    candidate_pool: Sequence[UserRead],
    *,
    team_scoped: bool | None = None,
) -> Dict[str, Any]:
    """Check creation preconditions in order and build the task document."""

    if actor is None:
        raise AuthorizationError("error_not_authenticated", "You must be logged in")
    title = draft.title.strip()
    if not title:
        raise ValidationError("error_title_required", "Title is required", field="title")
    if milestone is None or not milestone.is_open:
        raise ValidationError(
            "error_active_milestone_required",
            "An active milestone is required before creating tasks",
            field="milestoneId",
        )
    if draft.milestone_id and draft.milestone_id != milestone.id:
        raise ValidationError(
            "error_milestone_not_active",
            "Tasks can only be attached to the active milestone",
            field="milestoneId",
        )
    if not can_create_task(actor.role):
        raise AuthorizationError("error_task_create_forbidden", "You do not have permission to create tasks")

    assigned_user_ids = list(dict.fromkeys(uid for uid in draft.assigned_user_ids if uid))
    if draft.assigned_role is not None and assigned_user_ids:
        raise ValidationError(
            "error_ambiguous_assignment",
            "Assign a task to users or to a role, not both",
            field="assignedUserIds",
        )
    if draft.assigned_role is None:
        if not assigned_user_ids:
            raise ValidationError(
                "error_assignee_required", "Select at least one assignee", field="assignedUserIds"
            )
        allowed = {user.uid for user in assignable_users(actor, candidate_pool, team_scoped=team_scoped)}
        rejected = [uid for uid in assigned_user_ids if uid not in allowed]
        if rejected:
            raise AuthorizationError(
                "error_assignee_not_allowed",
                f"You are not allowed to assign: {', '.join(rejected)}",
                field="assignedUserIds",
            )
    elif draft.assigned_role not in assignable_roles(actor.role):
        raise AuthorizationError(
            "error_role_not_assignable",
            f"You are not allowed to assign tasks to {draft.assigned_role.value}",
            field="assignedRole",
        )

    return {
        "title": title,
        "description": draft.description.strip(),
        "milestone_id": milestone.id,
        "assigned_user_ids": assigned_user_ids,
        "assigned_role": draft.assigned_role,
        "assigned_by_id": actor.uid,
        "assigned_by_name": actor.label,
        "assigned_by_role": actor.role,
        "priority": draft.priority,
        "status": TaskStatus.TODO,
        "block_reason": None,
        "created_by": actor.uid,
        "created_by_name": actor.label,
        "created_by_role": actor.role,
        "created_at": now_millis(),
        "due_at": draft.due_at,
    }
