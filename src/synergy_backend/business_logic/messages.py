"""
Business logic for the chat history backfill.

Backfill is an ordinary request/response call outside the live channel.
It applies the same owner/member rule as the channel's admission guard
and translates chat errors into HTTP errors.
"""

import logging
from typing import List

from synergy_types.auth import Identity
from synergy_types.messages import ChatMessageGet
from synergy_backend.exceptions import (
    InternalServerException,
    ProjectAccessDeniedException,
    ProjectNotFoundException,
)
from synergy_backend.websocket.errors import NotAuthorized, ProjectNotFound
from synergy_backend.websocket.service import ChatService
from synergy_backend.websocket.stores import MessageStoreError

logger = logging.getLogger(__name__)


async def get_project_history(chat: ChatService, identity: Identity, project_id: str) -> List[ChatMessageGet]:
    """
    All messages of a project, oldest first.

    Raises:
        ProjectNotFoundException: Unknown project
        ProjectAccessDeniedException: Caller is neither owner nor member
    """
    try:
        await chat.guard.admit(identity, project_id)
    except ProjectNotFound:
        raise ProjectNotFoundException()
    except NotAuthorized:
        raise ProjectAccessDeniedException(user_id=identity.id)

    try:
        return await chat.messages.list_by_project(project_id)
    except MessageStoreError as e:
        raise InternalServerException(detail="Failed to fetch messages") from e
