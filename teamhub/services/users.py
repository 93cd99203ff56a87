from __future__ import annotations

from typing import List, Tuple

from teamhub.core.enums import Role, UserStatus
from teamhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from teamhub.core.logging import logger
from teamhub.core.rbac import (
    assignable_roles,
    can_change_user_role,
    can_change_user_status,
    can_view_users,
    is_designated_super_admin,
    self_signup_role,
)
from teamhub.core.timeutil import now_millis
from teamhub.schemas.auth import Identity
from teamhub.schemas.users import ManagedUserCreate, SignUpRequest, UserRead

from .base import ServiceBase


class UserService(ServiceBase):
    """Profiles, sign-in flow and role/status administration."""

    async def list(self, actor: UserRead) -> List[UserRead]:
        if not can_view_users(actor.role):
            raise AuthorizationError("error_users_forbidden", "You do not have access to users")
        return await self.store.list("users")

    async def get(self, uid: str) -> UserRead:
        user = await self.store.get("users", uid)
        if user is None:
            raise NotFoundError("error_user_not_found", f"User {uid} not found")
        return user

    async def resolve_profile(self, identity: Identity) -> UserRead | None:
        """Load the profile behind an identity, bootstrapping the super admin.

        The designated super admin gets a profile on first sign-in; any other
        identity without a profile resolves to ``None``.
        """

        profile = await self.store.get("users", identity.uid)
        if profile is not None:
            return profile
        if not is_designated_super_admin(identity.uid):
            logger.warning("user.profile_missing", uid=identity.uid)
            return None
        profile = await self.store.create(
            "users",
            {
                "email": identity.email,
                "display_name": "Super Admin",
                "role": Role.SUPER_ADMIN,
                "status": UserStatus.ACTIVE,
                "team_id": None,
                "created_at": now_millis(),
            },
            id=identity.uid,
        )
        logger.info("user.super_admin_bootstrapped", uid=identity.uid)
        return profile

    async def login(self, email: str, password: str) -> Tuple[UserRead, str]:
        identity = await self._identity().sign_in(email, password)
        profile = await self.resolve_profile(identity)
        if profile is None:
            await self._identity().sign_out(identity.uid)
            raise AuthorizationError(
                "error_profile_missing", "User profile not found in system. Please contact administrator."
            )
        if not profile.is_active:
            await self._identity().sign_out(identity.uid)
            raise AuthorizationError(f"error_account_{profile.status.value}", f"User account is {profile.status.value}")
        logger.info("user.logged_in", uid=profile.uid, role=profile.role.value)
        return profile, self._identity().issue_token(identity)

    async def logout(self, actor: UserRead) -> None:
        await self._identity().sign_out(actor.uid)

    async def sign_up(self, payload: SignUpRequest, creator: UserRead | None = None) -> Tuple[UserRead, str]:
        """Register and sign in a new account.

        Without a signed-in creator the profile is always ``trial_staff``;
        asking for anything else is refused rather than silently downgraded.
        """

        allowed = {self_signup_role()} if creator is None else set(assignable_roles(creator.role))
        role = payload.role or self_signup_role()
        if role not in allowed:
            raise AuthorizationError("error_role_not_assignable", "You are not allowed to assign that role", field="role")
        identity = await self._identity().sign_up(payload.email, payload.password)
        profile = await self._create_profile(identity, payload.display_name, role)
        logger.info("user.signed_up", uid=profile.uid, role=role.value)
        return profile, self._identity().issue_token(identity)

    async def create_managed_user(self, actor: UserRead, payload: ManagedUserCreate) -> UserRead:
        """Create another person's account without touching the actor's session."""

        allowed = assignable_roles(actor.role)
        if not allowed:
            raise AuthorizationError("error_users_create_forbidden", "You do not have permission to create users")
        if payload.role not in allowed:
            raise AuthorizationError("error_role_not_assignable", "You are not allowed to assign that role", field="role")
        if not payload.display_name.strip():
            raise ValidationError("error_display_name_required", "Name is required", field="displayName")
        identity = await self._identity().register(payload.email, payload.password)
        profile = await self._create_profile(identity, payload.display_name, payload.role)
        logger.info("user.created", uid=profile.uid, role=payload.role.value, created_by=actor.uid)
        return profile

    async def change_role(self, actor: UserRead, uid: str, new_role: Role) -> UserRead:
        if is_designated_super_admin(uid):
            raise AuthorizationError("error_super_admin_immutable", "Super Admin role cannot be changed")
        target = await self.get(uid)
        if not can_change_user_role(actor, target, new_role):
            raise AuthorizationError("error_role_not_assignable", "You are not allowed to assign that role", field="role")
        updated = await self.store.update("users", uid, {"role": new_role})
        logger.info("user.role_changed", uid=uid, old_role=target.role.value, new_role=new_role.value)
        return updated

    async def change_status(self, actor: UserRead, uid: str, new_status: UserStatus) -> UserRead:
        if is_designated_super_admin(uid):
            raise AuthorizationError("error_super_admin_immutable", "Super Admin status cannot be changed")
        target = await self.get(uid)
        if not can_change_user_status(actor, target, new_status):
            raise AuthorizationError("error_status_forbidden", "You are not authorized to change status")
        updated = await self.store.update("users", uid, {"status": new_status})
        if new_status is not UserStatus.ACTIVE:
            # Drop live sessions of banned or timed out accounts.
            await self._identity().revoke_sessions(uid)
        logger.info("user.status_changed", uid=uid, status=new_status.value)
        return updated

    async def update_display_name(self, actor: UserRead, display_name: str) -> UserRead:
        name = display_name.strip()
        if not name:
            raise ValidationError("error_display_name_required", "Name is required", field="displayName")
        updated = await self.store.update("users", actor.uid, {"display_name": name})
        logger.info("user.updated", uid=actor.uid)
        return updated

    async def change_password(self, actor: UserRead, new_password: str) -> None:
        await self._identity().change_password(actor.uid, new_password)

    async def _create_profile(self, identity: Identity, display_name: str, role: Role) -> UserRead:
        return await self.store.create(
            "users",
            {
                "email": identity.email,
                "display_name": display_name.strip(),
                "role": role,
                "status": UserStatus.ACTIVE,
                "team_id": None,
                "created_at": now_millis(),
            },
            id=identity.uid,
        )

    def _identity(self):
        if self.identity is None:
            raise RuntimeError("UserService requires an identity provider")
        return self.identity
