"""
WebSocket event DTOs for the project chat channel.

Every frame is a JSON object with a ``type`` discriminator. Field names are
camelCase on the wire (``userId``, ``projectId``), the persisted message id is
sent as ``_id``.

Client -> Server:
- message: send a chat message to the connection's project

Server -> Client:
- connected: admission succeeded (sent to the admitted connection only)
- error: admission failed (followed by close) or an in-session protocol error
- message: a persisted message broadcast to the whole project group
- ack: per-send acknowledgment, correlated via ``ref``
- user_left: a peer disconnected from the project group
"""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import ConfigDict, Field, ValidationError, field_serializer, field_validator

from synergy_types.base import CamelModel, format_timestamp, utc_now
from synergy_types.messages import MAX_CONTENT_LENGTH, ChatMessageGet


# =============================================================================
# Base Event Types
# =============================================================================

class WSEventBase(CamelModel):
    """Base class for all WebSocket events."""
    type: str


# =============================================================================
# Client -> Server Events
# =============================================================================

class WSSendMessage(WSEventBase):
    """
    Chat message sent by a client.

    Unknown fields are rejected, so a client cannot smuggle author
    fields into a send.
    """
    type: Literal["message"] = "message"
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    ref: Optional[str] = Field(None, max_length=128, description="Client correlation id echoed in the ack")

    model_config = ConfigDict(extra="forbid")

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message content must not be empty")
        return value


# =============================================================================
# Server -> Client Events
# =============================================================================

class WSConnected(WSEventBase):
    """Admission confirmation."""
    type: Literal["connected"] = "connected"
    message: str = "Successfully connected to chat"
    user_id: str
    username: str
    project_id: str


class WSError(WSEventBase):
    """Error event. Before admission it is always followed by a close."""
    type: Literal["error"] = "error"
    code: str = Field(..., description="Error code, e.g. NOT_AUTHORIZED")
    message: str = Field(..., description="Human-readable error message")


class WSMessage(ChatMessageGet):
    """Broadcast of a persisted chat message."""
    type: Literal["message"] = "message"

    @classmethod
    def from_message(cls, message: ChatMessageGet) -> "WSMessage":
        return cls(**message.model_dump())


class WSAck(WSEventBase):
    """Acknowledgment for a single send."""
    type: Literal["ack"] = "ack"
    ref: Optional[str] = None
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class WSUserLeft(WSEventBase):
    """A peer left the project group."""
    type: Literal["user_left"] = "user_left"
    user_id: str
    username: str
    timestamp: datetime = Field(default_factory=utc_now)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)


# =============================================================================
# Union Types for Parsing
# =============================================================================

ServerEvent = Union[
    WSConnected,
    WSError,
    WSMessage,
    WSAck,
    WSUserLeft,
]

SERVER_EVENT_TYPES = {
    "connected": WSConnected,
    "error": WSError,
    "message": WSMessage,
    "ack": WSAck,
    "user_left": WSUserLeft,
}


def parse_server_event(data: dict) -> Optional[ServerEvent]:
    """
    Parse a server frame into a typed event (used by clients).

    Returns None for unknown types or malformed payloads.
    """
    event_class = SERVER_EVENT_TYPES.get(data.get("type"))
    if event_class is None:
        return None
    try:
        return event_class.model_validate(data)
    except ValidationError:
        return None


def to_frame(event) -> dict:
    """Serialize an event for the wire: JSON types, camelCase, no null fields."""
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)
