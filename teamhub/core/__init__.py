from .enums import CommentType, MilestoneStatus, Role, TaskPriority, TaskStatus, Tenancy, UserStatus
from .errors import AuthorizationError, CollaboratorError, NotFoundError, TeamHubError, ValidationError
from .logging import configure_logging, logger
from .security import hash_password, issue_session_token, read_session_token, verify_password
from .settings import settings

__all__ = [
    "AuthorizationError",
    "CollaboratorError",
    "CommentType",
    "MilestoneStatus",
    "NotFoundError",
    "Role",
    "TaskPriority",
    "TaskStatus",
    "TeamHubError",
    "Tenancy",
    "UserStatus",
    "ValidationError",
    "configure_logging",
    "logger",
    "hash_password",
    "issue_session_token",
    "read_session_token",
    "verify_password",
    "settings",
]
