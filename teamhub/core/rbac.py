"""Role model and authorization engine.

Every rank or capability comparison in the application goes through this
module. The functions are pure predicates over user snapshots; they never
query storage, so callers are responsible for handing in fresh records.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional

from .enums import Role, UserStatus
from .settings import settings

if TYPE_CHECKING:  # pragma: no cover
    from teamhub.schemas.users import UserRead


_ROLE_RANK = {
    Role.TRIAL_STAFF: 1,
    Role.STAFF: 2,
    Role.DEVELOPER: 3,
    Role.ADMIN: 4,
    Role.SUPER_ADMIN: 5,
}

# Highest rank first.
ALL_ROLES: tuple[Role, ...] = tuple(sorted(_ROLE_RANK, key=_ROLE_RANK.__getitem__, reverse=True))

_ASSIGNABLE_ROLES = {
    Role.SUPER_ADMIN: frozenset(ALL_ROLES),
    Role.ADMIN: frozenset({Role.STAFF, Role.TRIAL_STAFF}),
    Role.DEVELOPER: frozenset({Role.TRIAL_STAFF}),
    Role.STAFF: frozenset({Role.TRIAL_STAFF}),
    Role.TRIAL_STAFF: frozenset(),
}

_STATUS_MANAGERS = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
_TEAM_MANAGERS = frozenset({Role.SUPER_ADMIN, Role.ADMIN})


def coerce_role(value: Role | str | None) -> Optional[Role]:
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def rank(role: Role | str | None) -> int:
    """Rank of ``role``; unknown or missing roles rank below everyone."""

    parsed = coerce_role(role)
    if parsed is None:
        return 0
    return _ROLE_RANK[parsed]


def outranks(held: Role | str | None, other: Role | str | None) -> bool:
    return rank(held) > rank(other)


def assignable_roles(creator_role: Role | str | None) -> FrozenSet[Role]:
    parsed = coerce_role(creator_role)
    if parsed is None:
        return frozenset()
    return _ASSIGNABLE_ROLES[parsed]


def self_signup_role() -> Role:
    """Role given to a profile created through public sign-up."""

    return Role.TRIAL_STAFF


def can_assign_role(actor_role: Role | str | None, target_role: Role | str | None) -> bool:
    parsed = coerce_role(target_role)
    return parsed is not None and parsed in assignable_roles(actor_role)


def is_designated_super_admin(uid: str | None, *, super_admin_uid: str | None = None) -> bool:
    designated = super_admin_uid if super_admin_uid is not None else settings.super_admin_uid
    return bool(uid) and uid == designated


def can_manage_user(
    actor: Optional["UserRead"],
    target: "UserRead",
    *,
    super_admin_uid: str | None = None,
) -> bool:
    if actor is None:
        return False
    if is_designated_super_admin(target.uid, super_admin_uid=super_admin_uid):
        return False
    if coerce_role(actor.role) is Role.SUPER_ADMIN:
        return True
    return outranks(actor.role, target.role)


def can_change_user_status(
    actor: Optional["UserRead"],
    target: "UserRead",
    new_status: UserStatus | str,
    *,
    super_admin_uid: str | None = None,
) -> bool:
    if actor is None or coerce_role(actor.role) not in _STATUS_MANAGERS:
        return False
    try:
        UserStatus(new_status)
    except ValueError:
        return False
    return can_manage_user(actor, target, super_admin_uid=super_admin_uid)


def can_change_user_role(
    actor: Optional["UserRead"],
    target: "UserRead",
    new_role: Role | str,
    *,
    super_admin_uid: str | None = None,
) -> bool:
    if actor is None:
        return False
    return can_manage_user(actor, target, super_admin_uid=super_admin_uid) and can_assign_role(
        actor.role, new_role
    )


def can_create_task(actor_role: Role | str | None) -> bool:
    parsed = coerce_role(actor_role)
    return parsed is not None and parsed is not Role.TRIAL_STAFF


def can_view_users(actor_role: Role | str | None) -> bool:
    return can_create_task(actor_role)


def can_manage_teams(actor_role: Role | str | None) -> bool:
    return coerce_role(actor_role) in _TEAM_MANAGERS


def can_manage_milestone(actor: Optional["UserRead"], team_id: str | None = None) -> bool:
    """Super admins own milestones; with per-team milestones a team's admin does too."""

    if actor is None:
        return False
    role = coerce_role(actor.role)
    if role is Role.SUPER_ADMIN:
        return True
    if not settings.multi_team or team_id is None:
        return False
    return role is Role.ADMIN and actor.team_id == team_id


def assignable_users(
    actor: Optional["UserRead"],
    candidate_pool: Iterable["UserRead"],
    *,
    team_scoped: bool | None = None,
) -> List["UserRead"]:
    """Users ``actor`` may name as task assignees, in pool order.

    With ``team_scoped`` (defaults to multi-team mode) non super admins are
    further limited to members of their own team.
    """

    if actor is None:
        return []
    allowed = assignable_roles(actor.role)
    if not allowed:
        return []
    if team_scoped is None:
        team_scoped = settings.multi_team
    restrict_team = team_scoped and coerce_role(actor.role) is not Role.SUPER_ADMIN
    selected: List["UserRead"] = []
    for candidate in candidate_pool:
        if coerce_role(candidate.role) not in allowed:
            continue
        if restrict_team and (actor.team_id is None or candidate.team_id != actor.team_id):
            continue
        selected.append(candidate)
    return selected
