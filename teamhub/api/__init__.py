from . import (
    auth_router,
    milestones_router,
    tasks_router,
    teams_router,
    users_router,
)

__all__ = [
    "auth_router",
    "milestones_router",
    "tasks_router",
    "teams_router",
    "users_router",
]
