from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field, field_validator

from teamhub.core.enums import CommentType, Role, TaskPriority, TaskStatus
from teamhub.core.timeutil import now_millis, to_millis

from .base import DocumentModel, RequestModel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskRead(DocumentModel):
    id: str
    title: str = ""
    description: str = ""
    milestone_id: str = ""
    assigned_user_ids: List[str] = Field(default_factory=list)
    assigned_role: Role | None = None
    assigned_by_id: str | None = None
    assigned_by_name: str = ""
    assigned_by_role: Role = Role.TRIAL_STAFF
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    block_reason: str | None = None
    created_by: str = ""
    created_by_name: str = ""
    created_by_role: Role = Role.TRIAL_STAFF
    created_at: int = Field(default_factory=now_millis)
    due_at: int | None = None

    @field_validator("title", "description", "milestone_id", "assigned_by_name", "created_by", "created_by_name", mode="before")
    @classmethod
    def blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("assigned_user_ids", mode="before")
    @classmethod
    def drop_empty_ids(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [uid for uid in value if uid]
        return value

    @field_validator("assigned_role", "assigned_by_id", "block_reason", mode="before")
    @classmethod
    def blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("assigned_by_role", "created_by_role", mode="before")
    @classmethod
    def default_role(cls, value: Any) -> Any:
        return value or Role.TRIAL_STAFF

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, value: Any) -> Any:
        return value or TaskPriority.MEDIUM

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or TaskStatus.TODO

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_created_at(cls, value: Any) -> int:
        millis = to_millis(value)
        return now_millis() if millis is None else millis

    @field_validator("due_at", mode="before")
    @classmethod
    def coerce_due_at(cls, value: Any) -> int | None:
        return to_millis(value)

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE


class TaskCreate(RequestModel):
    """Task draft. Preconditions are checked by the lifecycle manager so that
    failures name the missing field instead of a schema error."""

    title: str = ""
    description: str = ""
    milestone_id: str | None = None
    assigned_user_ids: List[str] = Field(default_factory=list)
    assigned_role: Role | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_at: int | None = None

    @field_validator("due_at", mode="before")
    @classmethod
    def coerce_due_at(cls, value: Any) -> int | None:
        return to_millis(value)


class TaskStatusUpdate(RequestModel):
    status: TaskStatus
    block_reason: str | None = None


class TaskBoard(BaseModel):
    mine: List[TaskRead] = Field(default_factory=list)
    subordinates: List[TaskRead] = Field(default_factory=list)


class CommentRead(DocumentModel):
    id: str
    task_id: str
    user_id: str
    user_name: str = ""
    user_role: Role = Role.TRIAL_STAFF
    text: str = ""
    timestamp: int = Field(default_factory=now_millis)
    type: CommentType = CommentType.COMMENT

    @field_validator("user_name", "text", mode="before")
    @classmethod
    def blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("user_role", mode="before")
    @classmethod
    def default_role(cls, value: Any) -> Any:
        return value or Role.TRIAL_STAFF

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, value: Any) -> Any:
        return value or CommentType.COMMENT

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> int:
        millis = to_millis(value)
        return now_millis() if millis is None else millis


class CommentCreate(RequestModel):
    text: str
