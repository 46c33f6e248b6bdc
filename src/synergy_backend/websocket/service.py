from dataclasses import dataclass
from typing import Optional

from synergy_backend.database import SessionFactory
from synergy_backend.utils.tokens import TokenService
from synergy_backend.websocket.auth import SessionAuthenticator
from synergy_backend.websocket.channel import MessageChannel
from synergy_backend.websocket.connection_manager import ConnectionManager
from synergy_backend.websocket.guard import RoomMembershipGuard
from synergy_backend.websocket.stores import (
    MessageLogStore,
    SqlIdentityDirectory,
    SqlMessageLogStore,
    SqlProjectDirectory,
)


@dataclass
class ChatService:
    """
    The realtime channel's collaborators, built once per application.

    Stored on ``app.state.chat``; nothing in the channel reaches for a
    module level singleton.
    """
    authenticator: SessionAuthenticator
    guard: RoomMembershipGuard
    manager: ConnectionManager
    channel: MessageChannel
    messages: MessageLogStore

    @classmethod
    def create(
        cls,
        session_factory: SessionFactory,
        token_service: TokenService,
        send_timeout: Optional[float] = None,
    ) -> "ChatService":
        messages = SqlMessageLogStore(session_factory)
        manager = ConnectionManager(send_timeout=send_timeout)
        return cls(
            authenticator=SessionAuthenticator(token_service, SqlIdentityDirectory(session_factory)),
            guard=RoomMembershipGuard(SqlProjectDirectory(session_factory)),
            manager=manager,
            channel=MessageChannel(messages, manager),
            messages=messages,
        )
