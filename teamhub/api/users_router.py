from __future__ import annotations

from fastapi import APIRouter, Depends, status

from teamhub.core.enums import Role
from teamhub.schemas.users import ManagedUserCreate, RoleUpdate, StatusUpdate, UserRead
from teamhub.services.users import UserService

from .deps import get_current_user, provide_service, require_roles

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/", response_model=list[UserRead])
async def list_users(
    user: UserRead = Depends(require_roles(Role.SUPER_ADMIN, Role.ADMIN, Role.DEVELOPER, Role.STAFF)),
    service: UserService = Depends(provide_service(UserService)),
) -> list[UserRead]:
    return await service.list(user)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: ManagedUserCreate,
    user: UserRead = Depends(get_current_user),
    service: UserService = Depends(provide_service(UserService)),
) -> UserRead:
    return await service.create_managed_user(user, payload)


@router.patch("/{uid}/role", response_model=UserRead)
async def change_role(
    uid: str,
    payload: RoleUpdate,
    user: UserRead = Depends(get_current_user),
    service: UserService = Depends(provide_service(UserService)),
) -> UserRead:
    return await service.change_role(user, uid, payload.role)


@router.patch("/{uid}/status", response_model=UserRead)
async def change_status(
    uid: str,
    payload: StatusUpdate,
    user: UserRead = Depends(require_roles(Role.SUPER_ADMIN, Role.ADMIN)),
    service: UserService = Depends(provide_service(UserService)),
) -> UserRead:
    return await service.change_status(user, uid, payload.status)
