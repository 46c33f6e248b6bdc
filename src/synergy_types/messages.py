from datetime import datetime

from pydantic import BaseModel, Field, field_serializer, field_validator

from synergy_types.base import CamelModel, format_timestamp

MAX_CONTENT_LENGTH = 16384


class ChatMessageCreate(BaseModel):
    """
    Server-side draft of a chat message.

    Author fields are always filled from the authenticated session,
    never from client payloads.
    """
    project_id: str
    user_id: str
    username: str
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class ChatMessageGet(CamelModel):
    """Persisted chat message as sent to clients (broadcast and backfill)."""
    id: str = Field(..., alias="_id")
    project_id: str
    user_id: str
    username: str
    content: str
    timestamp: datetime

    @field_validator("id", "project_id", "user_id", mode="before")
    @classmethod
    def _coerce_str(cls, value):
        return str(value) if value is not None else value

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)
