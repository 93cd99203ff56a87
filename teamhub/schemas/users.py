from __future__ import annotations

from typing import Any

from pydantic import EmailStr, Field, field_validator

from teamhub.core.enums import Role, UserStatus
from teamhub.core.timeutil import now_millis, to_millis

from .base import DocumentModel, RequestModel


class UserRead(DocumentModel):
    uid: str
    email: str = ""
    display_name: str = ""
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    team_id: str | None = None
    created_at: int = Field(default_factory=now_millis)

    @field_validator("display_name", "email", mode="before")
    @classmethod
    def blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("team_id", mode="before")
    @classmethod
    def blank_team(cls, value: Any) -> Any:
        return value or None

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_created_at(cls, value: Any) -> int:
        millis = to_millis(value)
        return now_millis() if millis is None else millis

    @property
    def label(self) -> str:
        return self.display_name or self.email

    @property
    def is_active(self) -> bool:
        return self.status is UserStatus.ACTIVE


class SignUpRequest(RequestModel):
    email: EmailStr
    password: str
    display_name: str = ""
    role: Role | None = None


class ManagedUserCreate(RequestModel):
    email: EmailStr
    password: str
    display_name: str
    role: Role


class LoginRequest(RequestModel):
    email: EmailStr
    password: str


class RoleUpdate(RequestModel):
    role: Role


class StatusUpdate(RequestModel):
    status: UserStatus


class ProfileUpdate(RequestModel):
    display_name: str


class PasswordChange(RequestModel):
    new_password: str
