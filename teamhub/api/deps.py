from __future__ import annotations

from typing import Type, TypeVar

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.core.enums import Role
from teamhub.core.errors import AuthorizationError
from teamhub.core.logging import bind_actor
from teamhub.schemas.users import UserRead
from teamhub.services.base import ServiceBase, get_session
from teamhub.services.events import EventHub
from teamhub.services.identity import IdentityProvider
from teamhub.services.store import DocumentStore

ServiceT = TypeVar("ServiceT", bound=ServiceBase)

auth_scheme = HTTPBearer(auto_error=False)

definition_error = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail={"code": "error_not_authenticated", "message": "You must be logged in"},
    headers={"WWW-Authenticate": "Bearer"},
)


def get_hub(request: Request) -> EventHub:
    return request.app.state.hub


def get_store(
    session: AsyncSession = Depends(get_session),
    hub: EventHub = Depends(get_hub),
) -> DocumentStore:
    return DocumentStore(session, hub)


def get_identity(
    session: AsyncSession = Depends(get_session),
    hub: EventHub = Depends(get_hub),
) -> IdentityProvider:
    return IdentityProvider(session, hub)


def provide_service(service_cls: Type[ServiceT]):
    def dependency(
        store: DocumentStore = Depends(get_store),
        identity: IdentityProvider = Depends(get_identity),
    ) -> ServiceT:
        return service_cls(store, identity)

    return dependency


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(auth_scheme),
    store: DocumentStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity),
) -> UserRead:
    """Resolve the signed-in, active profile behind the bearer token."""

    if credentials is None:
        raise definition_error
    account = await identity.verify_token(credentials.credentials)
    profile = await store.get("users", account.uid)
    if profile is None:
        raise AuthorizationError("error_profile_missing", "User profile not found in system.")
    if not profile.is_active:
        raise AuthorizationError(f"error_account_{profile.status.value}", f"User account is {profile.status.value}")
    bind_actor(profile.uid, profile.role.value)
    return profile


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(auth_scheme),
    store: DocumentStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity),
) -> UserRead | None:
    if credentials is None:
        return None
    return await get_current_user(credentials, store, identity)


def require_roles(*roles: Role):
    async def dependency(user: UserRead = Depends(get_current_user)) -> UserRead:
        if roles and user.role not in roles:
            raise AuthorizationError("error_forbidden", "You don't have permission to access this page.")
        return user

    return dependency
