from typing import Annotated, List

from fastapi import APIRouter, Depends, Request

from synergy_types.auth import Identity
from synergy_types.messages import ChatMessageGet
from synergy_backend.business_logic.messages import get_project_history
from synergy_backend.permissions.auth import get_current_identity

messages_router = APIRouter()


@messages_router.get("/projects/{project_id}/messages", response_model=List[ChatMessageGet])
async def list_project_messages(
    project_id: str,
    request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
):
    """
    Chat history backfill for a project.

    Same access rule as the live channel: project owner or member.
    Messages are ordered by timestamp, ties by insertion order.
    """
    return await get_project_history(request.app.state.chat, identity, project_id)
