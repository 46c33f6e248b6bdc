"""
Collaborators of the realtime channel.

The channel only talks to these protocols, so tests can drive it with
in-memory fakes. The SQL adapters run the blocking repository calls in
Starlette's threadpool and keep one short transaction per call.
"""

import logging
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from synergy_types.auth import Identity
from synergy_types.messages import ChatMessageCreate, ChatMessageGet
from synergy_types.projects import ProjectAccess
from synergy_backend.database import SessionFactory, session_scope
from synergy_backend.model.message import Message
from synergy_backend.repositories import MessageRepository, ProjectRepository, UserRepository

logger = logging.getLogger(__name__)


class MessageStoreError(Exception):
    """Persisting or reading the message log failed."""


class IdentityDirectory(Protocol):

    async def get_identity(self, user_id: str) -> Optional[Identity]:
        """Return the identity or None when the user does not exist."""
        ...


class ProjectDirectory(Protocol):

    async def get_project_access(self, project_id: str) -> Optional[ProjectAccess]:
        """Return owner and member e-mails, or None for an unknown project."""
        ...


class MessageLogStore(Protocol):

    async def append(self, draft: ChatMessageCreate) -> ChatMessageGet:
        """Persist a message and return it with server assigned id and timestamp."""
        ...

    async def list_by_project(self, project_id: str) -> List[ChatMessageGet]:
        """All messages of a project in ascending timestamp order."""
        ...


def message_to_dto(message: Message) -> ChatMessageGet:
    return ChatMessageGet(
        id=message.id,
        project_id=message.project_id,
        user_id=message.user_id,
        username=message.username,
        content=message.content,
        timestamp=message.created_at,
    )


class SqlIdentityDirectory:

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def get_identity(self, user_id: str) -> Optional[Identity]:
        return await run_in_threadpool(self._get_identity, user_id)

    def _get_identity(self, user_id: str) -> Optional[Identity]:
        with session_scope(self._session_factory) as db:
            user = UserRepository(db).get_by_id_optional(user_id)
            if user is None:
                return None
            return Identity(id=user.id, name=user.name, email=user.email)


class SqlProjectDirectory:

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def get_project_access(self, project_id: str) -> Optional[ProjectAccess]:
        return await run_in_threadpool(self._get_project_access, project_id)

    def _get_project_access(self, project_id: str) -> Optional[ProjectAccess]:
        with session_scope(self._session_factory) as db:
            project = ProjectRepository(db).get_by_id_optional(project_id)
            if project is None:
                return None
            return ProjectAccess(
                project_id=project.id,
                owner_email=project.creator_email,
                member_emails=tuple(project.members),
            )


class SqlMessageLogStore:

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def append(self, draft: ChatMessageCreate) -> ChatMessageGet:
        try:
            return await run_in_threadpool(self._append, draft)
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist message for project {draft.project_id}: {e}")
            raise MessageStoreError("Failed to save message") from e

    async def list_by_project(self, project_id: str) -> List[ChatMessageGet]:
        try:
            return await run_in_threadpool(self._list_by_project, project_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load messages for project {project_id}: {e}")
            raise MessageStoreError("Failed to load messages") from e

    def _append(self, draft: ChatMessageCreate) -> ChatMessageGet:
        with session_scope(self._session_factory) as db:
            message = MessageRepository(db).append(
                project_id=draft.project_id,
                user_id=draft.user_id,
                username=draft.username,
                content=draft.content,
            )
            return message_to_dto(message)

    def _list_by_project(self, project_id: str) -> List[ChatMessageGet]:
        with session_scope(self._session_factory) as db:
            return [message_to_dto(m) for m in MessageRepository(db).find_by_project(project_id)]
