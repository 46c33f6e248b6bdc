"""
WebSocket package for the realtime project chat.

This package provides:
- Token authentication at connection time (``auth``)
- Owner/member admission per project (``guard``)
- The per-project group registry and fan-out (``connection_manager``)
- Validated, persist-then-broadcast sends with typed results (``channel``)
- Storage ports and their SQL adapters (``stores``)
- The ``/ws`` endpoint (``router``)
"""

from synergy_backend.websocket.auth import SessionAuthenticator
from synergy_backend.websocket.channel import MessageChannel, SendFailed, SendResult, SendSucceeded
from synergy_backend.websocket.connection_manager import Connection, ConnectionManager, ConnectionState, WebSocketMetrics
from synergy_backend.websocket.guard import RoomMembershipGuard
from synergy_backend.websocket.service import ChatService

__all__ = [
    "SessionAuthenticator",
    "RoomMembershipGuard",
    "Connection",
    "ConnectionManager",
    "ConnectionState",
    "WebSocketMetrics",
    "MessageChannel",
    "SendResult",
    "SendSucceeded",
    "SendFailed",
    "ChatService",
]
