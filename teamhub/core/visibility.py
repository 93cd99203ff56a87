"""Split a task snapshot into the viewer's own work and their subordinates'.

Views are rebuilt from scratch on every snapshot; nothing is cached between
calls.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional

from teamhub.schemas.tasks import TaskBoard, TaskRead
from teamhub.schemas.users import UserRead

from .enums import Role
from .rbac import coerce_role, rank


def _due_key(task: TaskRead) -> float:
    return math.inf if task.due_at is None else task.due_at


def index_users(users: Iterable[UserRead]) -> Dict[str, UserRead]:
    return {user.uid: user for user in users}


def is_mine(task: TaskRead, viewer: Optional[UserRead]) -> bool:
    if viewer is None:
        return False
    if viewer.uid in task.assigned_user_ids:
        return True
    return task.assigned_role is not None and task.assigned_role == coerce_role(viewer.role)


def is_subordinate_task(
    task: TaskRead,
    viewer: Optional[UserRead],
    users_by_id: Mapping[str, UserRead],
) -> bool:
    """True when the task targets a role or a user ranked strictly below the viewer.

    Own tasks are never subordinate tasks.
    """

    if viewer is None or coerce_role(viewer.role) in (None, Role.TRIAL_STAFF):
        return False
    if is_mine(task, viewer):
        return False
    viewer_rank = rank(viewer.role)
    if task.assigned_role is not None and rank(task.assigned_role) < viewer_rank:
        return True
    assignees = resolve_assignees(task, users_by_id.values())
    return any(rank(assignee.role) < viewer_rank for assignee in assignees)


def resolve_assignees(task: TaskRead, users: Iterable[UserRead]) -> List[UserRead]:
    """Users a task currently targets.

    Role assignments resolve against the users holding that role right now,
    so promotions and demotions move role tasks with them.
    """

    if task.assigned_role is not None:
        return [user for user in users if coerce_role(user.role) == task.assigned_role]
    wanted = set(task.assigned_user_ids)
    return [user for user in users if user.uid in wanted]


def partition(
    tasks: Iterable[TaskRead],
    viewer: Optional[UserRead],
    users: Iterable[UserRead],
) -> TaskBoard:
    if viewer is None:
        return TaskBoard()
    users_by_id = index_users(users)
    ordered = sorted(tasks, key=_due_key)

    mine: List[TaskRead] = []
    subordinates: List[TaskRead] = []
    for task in ordered:
        if is_mine(task, viewer):
            mine.append(task)
        elif is_subordinate_task(task, viewer, users_by_id):
            subordinates.append(task)

    # Stable sort keeps the due-date order inside each group.
    mine.sort(key=lambda task: task.is_done)
    return TaskBoard(mine=mine, subordinates=subordinates)
