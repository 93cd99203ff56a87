from __future__ import annotations

from typing import Any, List

from pydantic import Field, field_validator

from teamhub.core.timeutil import now_millis, to_millis

from .base import DocumentModel, RequestModel


class TeamRead(DocumentModel):
    id: str
    name: str
    created_by: str = ""
    members: List[str] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_millis)

    @field_validator("members", mode="before")
    @classmethod
    def drop_empty_members(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(dict.fromkeys(uid for uid in value if uid))
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_created_at(cls, value: Any) -> int:
        millis = to_millis(value)
        return now_millis() if millis is None else millis


class TeamCreate(RequestModel):
    name: str
    members: List[str] = Field(default_factory=list)


class TeamUpdate(RequestModel):
    name: str | None = None
