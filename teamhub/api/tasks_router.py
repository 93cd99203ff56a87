from __future__ import annotations

from fastapi import APIRouter, Depends, status

from teamhub.schemas.tasks import (
    CommentCreate,
    CommentRead,
    TaskBoard,
    TaskCreate,
    TaskRead,
    TaskStatusUpdate,
)
from teamhub.schemas.users import UserRead
from teamhub.services.tasks import TaskService

from .deps import get_current_user, provide_service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("/", response_model=TaskBoard)
async def task_board(
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> TaskBoard:
    return await service.board(user)


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> TaskRead:
    return await service.create_task(user, payload)


@router.get("/{task_id}", response_model=TaskRead)
async def read_task(
    task_id: str,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> TaskRead:
    return await service.get_for(user, task_id)


@router.patch("/{task_id}/status", response_model=TaskRead)
async def change_status(
    task_id: str,
    payload: TaskStatusUpdate,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> TaskRead:
    return await service.change_status(user, task_id, payload.status, payload.block_reason)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> None:
    await service.delete_task(user, task_id)
    return None


@router.get("/{task_id}/comments", response_model=list[CommentRead])
async def list_comments(
    task_id: str,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> list[CommentRead]:
    return await service.list_comments(user, task_id)


@router.post("/{task_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: str,
    payload: CommentCreate,
    user: UserRead = Depends(get_current_user),
    service: TaskService = Depends(provide_service(TaskService)),
) -> CommentRead:
    return await service.add_comment(user, task_id, payload.text)
