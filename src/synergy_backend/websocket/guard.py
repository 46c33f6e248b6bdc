import logging
from typing import Optional

from synergy_types.auth import Identity
from synergy_types.projects import ProjectAccess
from synergy_backend.websocket.errors import NotAuthorized, ProjectIdRequired, ProjectNotFound
from synergy_backend.websocket.stores import ProjectDirectory

logger = logging.getLogger(__name__)


class RoomMembershipGuard:
    """
    Decides whether an identity may join a project's conversation.

    Owner and members get the same full read/write access. The check runs
    once per connection; it is not repeated for every message.
    """

    def __init__(self, projects: ProjectDirectory):
        self._projects = projects

    async def admit(self, identity: Identity, project_id: Optional[str]) -> ProjectAccess:
        if not project_id:
            raise ProjectIdRequired()

        access = await self._projects.get_project_access(project_id)
        if access is None:
            raise ProjectNotFound()

        if not access.admits(identity.email):
            logger.info(f"User {identity.id} denied access to project {project_id}")
            raise NotAuthorized()

        return access
