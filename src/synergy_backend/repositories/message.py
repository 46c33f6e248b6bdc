"""
Message repository for the project chat log.

The log is append-only: there is no update or delete path.
"""

from typing import List

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.message import Message


class MessageRepository(BaseRepository[Message]):

    def __init__(self, db: Session):
        super().__init__(db, Message)

    def append(self, project_id: str, user_id: str, username: str, content: str) -> Message:
        """
        Persist a new message.

        Id and timestamp are assigned here, at persistence time.
        """
        return self.create(
            Message(
                project_id=project_id,
                user_id=user_id,
                username=username,
                content=content,
            )
        )

    def find_by_project(self, project_id: str) -> List[Message]:
        """All messages of a project, oldest first; ties broken by insertion order."""
        return (
            self.db.query(Message)
            .filter(Message.project_id == project_id)
            .order_by(Message.created_at.asc(), Message.seq.asc())
            .all()
        )
