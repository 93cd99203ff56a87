from .auth import Identity, TokenResponse
from .milestones import MilestoneRead, MilestoneUpdate, MilestoneUpsert
from .tasks import CommentCreate, CommentRead, TaskBoard, TaskCreate, TaskRead, TaskStatusUpdate
from .teams import TeamCreate, TeamRead, TeamUpdate
from .users import (
    LoginRequest,
    ManagedUserCreate,
    PasswordChange,
    ProfileUpdate,
    RoleUpdate,
    SignUpRequest,
    StatusUpdate,
    UserRead,
)

__all__ = [
    "CommentCreate",
    "CommentRead",
    "Identity",
    "LoginRequest",
    "ManagedUserCreate",
    "MilestoneRead",
    "MilestoneUpdate",
    "MilestoneUpsert",
    "PasswordChange",
    "ProfileUpdate",
    "RoleUpdate",
    "SignUpRequest",
    "StatusUpdate",
    "TaskBoard",
    "TaskCreate",
    "TaskRead",
    "TaskStatusUpdate",
    "TeamCreate",
    "TeamRead",
    "TeamUpdate",
    "TokenResponse",
    "UserRead",
]
