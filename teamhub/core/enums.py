from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    DEVELOPER = "developer"
    STAFF = "staff"
    TRIAL_STAFF = "trial_staff"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BANNED = "banned"
    TIMEOUT = "timeout"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MilestoneStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    COMPLETED = "completed"


class CommentType(str, Enum):
    COMMENT = "comment"
    SYSTEM_LOG = "system_log"


class Tenancy(str, Enum):
    """Single global milestone, or milestones owned per team."""

    SINGLE = "single"
    MULTI = "multi"
