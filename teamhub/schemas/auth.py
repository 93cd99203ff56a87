from __future__ import annotations

from pydantic import BaseModel

from .users import UserRead


class Identity(BaseModel):
    """An authenticated account as seen by the identity provider."""

    uid: str
    email: str
    session_version: int = 0


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
