from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from teamhub.core.enums import MilestoneStatus
from teamhub.core.timeutil import now_millis, to_millis

from .base import DocumentModel, RequestModel


def clamp_progress(value: Any) -> Any:
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(0, min(100, int(value)))
    return value


class MilestoneRead(DocumentModel):
    id: str
    title: str
    deadline: int
    status: MilestoneStatus = MilestoneStatus.ACTIVE
    progress: int = 0
    created_by: str = ""
    created_by_name: str = ""
    team_id: str | None = None
    created_at: int = Field(default_factory=now_millis)
    updated_at: int = Field(default_factory=now_millis)

    @field_validator("progress", mode="before")
    @classmethod
    def clamp(cls, value: Any) -> Any:
        return clamp_progress(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or MilestoneStatus.ACTIVE

    @field_validator("team_id", mode="before")
    @classmethod
    def blank_team(cls, value: Any) -> Any:
        return value or None

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, value: Any) -> Any:
        millis = to_millis(value)
        return value if millis is None else millis

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamps(cls, value: Any) -> int:
        millis = to_millis(value)
        return now_millis() if millis is None else millis

    @property
    def is_open(self) -> bool:
        return self.status is not MilestoneStatus.COMPLETED


class MilestoneUpsert(RequestModel):
    title: str
    deadline: int
    status: MilestoneStatus = MilestoneStatus.ACTIVE
    progress: int = 0
    team_id: str | None = None

    @field_validator("progress", mode="before")
    @classmethod
    def clamp(cls, value: Any) -> Any:
        return clamp_progress(value)

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, value: Any) -> Any:
        millis = to_millis(value)
        return value if millis is None else millis


class MilestoneUpdate(RequestModel):
    title: str | None = None
    deadline: int | None = None
    status: MilestoneStatus | None = None
    progress: int | None = None

    @field_validator("progress", mode="before")
    @classmethod
    def clamp(cls, value: Any) -> Any:
        return None if value is None else clamp_progress(value)

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, value: Any) -> Any:
        return to_millis(value)
