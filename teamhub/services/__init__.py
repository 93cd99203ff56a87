from .events import EventHub
from .identity import IdentityProvider
from .milestones import MilestoneService
from .store import DocumentStore
from .tasks import TaskService
from .teams import TeamService
from .users import UserService

__all__ = [
    "DocumentStore",
    "EventHub",
    "IdentityProvider",
    "MilestoneService",
    "TaskService",
    "TeamService",
    "UserService",
]
