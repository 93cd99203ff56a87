"""Password hashing and session tokens.

Tokens carry the account's session version in ``ver``; the identity provider
rejects any token whose version no longer matches the stored one.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

import jwt
from passlib.context import CryptContext

from .settings import settings

_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class SessionClaims(NamedTuple):
    uid: str
    session_version: int


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def password_needs_rehash(password_hash: str) -> bool:
    return pwd_context.needs_update(password_hash)


def issue_session_token(uid: str, session_version: int, *, expires_hours: int | None = None) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": uid,
        "ver": session_version,
        "iss": settings.app_name,
        "iat": issued,
        "exp": issued + timedelta(hours=expires_hours or settings.jwt_expires_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def read_session_token(token: str) -> SessionClaims:
    """Decode and check a session token. Raises ``jwt.PyJWTError`` when invalid."""

    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[_ALGORITHM],
        issuer=settings.app_name,
        options={"require": ["sub", "ver", "exp"]},
    )
    version = payload["ver"]
    if not isinstance(version, int):
        raise jwt.InvalidTokenError("session version must be an integer")
    return SessionClaims(uid=str(payload["sub"]), session_version=version)
