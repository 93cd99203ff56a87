from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from teamhub.core.timeutil import now_millis


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


class CreatedAtMixin:
    """Epoch-millisecond creation stamp."""

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_millis)


class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    team_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)


class Credential(Base, CreatedAtMixin):
    """Sign-in secret for an identity. Profiles live in ``users``."""

    __tablename__ = "credentials"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    session_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Milestone(Base, CreatedAtMixin):
    __tablename__ = "milestones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    deadline: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    created_by_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    team_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_millis, onupdate=now_millis
    )


class Team(Base, CreatedAtMixin):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    members: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)


class Task(Base, CreatedAtMixin):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    milestone_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    assigned_user_ids: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    assigned_role: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    assigned_by_id: Mapped[Optional[str]] = mapped_column(String(64))
    assigned_by_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    assigned_by_role: Mapped[str] = mapped_column(String(32), nullable=False)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="todo")
    block_reason: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_by_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    created_by_role: Mapped[str] = mapped_column(String(32), nullable=False)
    due_at: Mapped[Optional[int]] = mapped_column(BigInteger)


class TaskComment(Base):
    """Append-only comment on a task. Not removed together with the task."""

    __tablename__ = "task_comments"
    __table_args__ = (Index("ix_task_comments_task_timestamp", "task_id", "timestamp"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    task_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_role: Mapped[str] = mapped_column(String(32), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_millis)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="comment")


__all__ = [
    "Base",
    "Credential",
    "Milestone",
    "Task",
    "TaskComment",
    "Team",
    "User",
]
