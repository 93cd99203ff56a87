from __future__ import annotations

from fastapi import APIRouter, Depends, status

from teamhub.schemas.auth import TokenResponse
from teamhub.schemas.users import LoginRequest, PasswordChange, ProfileUpdate, SignUpRequest, UserRead
from teamhub.services.users import UserService

from .deps import get_current_user, get_optional_user, provide_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: SignUpRequest,
    creator: UserRead | None = Depends(get_optional_user),
    service: UserService = Depends(provide_service(UserService)),
) -> TokenResponse:
    profile, token = await service.sign_up(payload, creator)
    return TokenResponse(access_token=token, user=profile)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(provide_service(UserService)),
) -> TokenResponse:
    profile, token = await service.login(payload.email, payload.password)
    return TokenResponse(access_token=token, user=profile)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    user: UserRead = Depends(get_current_user),
    service: UserService = Depends(provide_service(UserService)),
) -> None:
    await service.logout(user)
    return None


@router.get("/me", response_model=UserRead)
async def read_profile(user: UserRead = Depends(get_current_user)) -> UserRead:
    return user


@router.patch("/me", response_model=UserRead)
async def update_profile(
    payload: ProfileUpdate,
    user: UserRead = Depends(get_current_user),
    service: UserService = Depends(provide_service(UserService)),
) -> UserRead:
    return await service.update_display_name(user, payload.display_name)


@router.post("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: PasswordChange,
    user: UserRead = Depends(get_current_user),
    service: UserService = Depends(provide_service(UserService)),
) -> None:
    await service.change_password(user, payload.new_password)
    return None
