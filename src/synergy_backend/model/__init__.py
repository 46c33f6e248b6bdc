from .base import Base, metadata
from .auth import User
from .project import JoinRequest, Project, ProjectMember
from .message import Message

__all__ = [
    "Base",
    "metadata",
    "User",
    "Project",
    "ProjectMember",
    "JoinRequest",
    "Message",
]
