from .base import BaseRepository
from .user import UserRepository
from .project import ProjectRepository
from .join_request import JoinRequestRepository
from .message import MessageRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProjectRepository",
    "JoinRequestRepository",
    "MessageRepository",
]
