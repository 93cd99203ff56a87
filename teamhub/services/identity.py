from __future__ import annotations

from typing import Callable, Optional
from uuid import uuid4

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.core.errors import AuthorizationError, CollaboratorError, ValidationError
from teamhub.core.logging import logger
from teamhub.core.security import (
    hash_password,
    issue_session_token,
    password_needs_rehash,
    read_session_token,
    verify_password,
)
from teamhub.core.settings import settings
from teamhub.models import Credential
from teamhub.schemas.auth import Identity

from .events import EventHub

IDENTITY_TOPIC = "identity"

IdentityCallback = Callable[[Optional[Identity]], None]


def _identity(credential: Credential) -> Identity:
    return Identity(uid=credential.uid, email=credential.email, session_version=credential.session_version)


class IdentityProvider:
    """Email/password accounts with JWT sessions.

    Signing out bumps the account's session version, which invalidates every
    token issued before it.
    """

    def __init__(self, session: AsyncSession, hub: EventHub | None = None) -> None:
        self.session = session
        self.hub = hub or EventHub()

    async def register(self, email: str, password: str, *, uid: str | None = None) -> Identity:
        """Create an account without signing it in."""

        email = email.strip().lower()
        self._check_password(password)
        if await self._by_email(email) is not None:
            raise ValidationError("error_email_in_use", "An account with this email already exists", field="email")
        credential = Credential(
            uid=uid or uuid4().hex,
            email=email,
            password_hash=hash_password(password),
            session_version=0,
        )
        self.session.add(credential)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ValidationError("error_email_in_use", "An account with this email already exists", field="email") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise CollaboratorError("error_identity", f"sign up failed: {exc}") from exc
        logger.info("auth.registered", uid=credential.uid)
        return _identity(credential)

    async def sign_up(self, email: str, password: str, *, uid: str | None = None) -> Identity:
        identity = await self.register(email, password, uid=uid)
        self.hub.publish(IDENTITY_TOPIC, identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        credential = await self._by_email(email.strip().lower())
        if credential is None or not verify_password(password, credential.password_hash):
            logger.info("auth.sign_in_failed", email=email)
            raise AuthorizationError("error_invalid_credentials", "Invalid email or password")
        if password_needs_rehash(credential.password_hash):
            credential.password_hash = hash_password(password)
            await self._commit("password rehash")
        identity = _identity(credential)
        logger.info("auth.signed_in", uid=identity.uid)
        self.hub.publish(IDENTITY_TOPIC, identity)
        return identity

    async def sign_out(self, uid: str) -> None:
        """End the signed-in account's own session and announce it."""

        await self._bump_session(uid, "sign out")
        logger.info("auth.signed_out", uid=uid)
        self.hub.publish(IDENTITY_TOPIC, None)

    async def revoke_sessions(self, uid: str) -> None:
        """Invalidate another account's tokens. Identity listeners are not told."""

        await self._bump_session(uid, "session revoke")
        logger.info("auth.sessions_revoked", uid=uid)

    async def change_password(self, uid: str, new_password: str) -> None:
        self._check_password(new_password)
        credential = await self._by_uid(uid)
        if credential is None:
            raise AuthorizationError("error_invalid_credentials", "Unknown account")
        credential.password_hash = hash_password(new_password)
        await self._commit("password change")
        logger.info("auth.password_changed", uid=uid)

    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]:
        return self.hub.add_listener(IDENTITY_TOPIC, callback)

    def issue_token(self, identity: Identity) -> str:
        return issue_session_token(identity.uid, identity.session_version)

    async def verify_token(self, token: str) -> Identity:
        try:
            claims = read_session_token(token)
        except jwt.PyJWTError as exc:
            raise AuthorizationError("error_invalid_token", "Session is invalid or expired") from exc
        credential = await self._by_uid(claims.uid)
        if credential is None or claims.session_version != credential.session_version:
            raise AuthorizationError("error_invalid_token", "Session is invalid or expired")
        return _identity(credential)

    @staticmethod
    def _check_password(password: str) -> None:
        if len(password or "") < settings.min_password_length:
            raise ValidationError(
                "error_weak_password",
                f"Password must be at least {settings.min_password_length} characters",
                field="password",
            )

    async def _by_email(self, email: str) -> Credential | None:
        try:
            result = await self.session.execute(select(Credential).where(Credential.email == email))
        except SQLAlchemyError as exc:
            raise CollaboratorError("error_identity", f"account lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    async def _by_uid(self, uid: str) -> Credential | None:
        try:
            return await self.session.get(Credential, uid)
        except SQLAlchemyError as exc:
            raise CollaboratorError("error_identity", f"account lookup failed: {exc}") from exc

    async def _bump_session(self, uid: str, operation: str) -> None:
        credential = await self._by_uid(uid)
        if credential is not None:
            credential.session_version += 1
            await self._commit(operation)

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise CollaboratorError("error_identity", f"{operation} failed: {exc}") from exc
