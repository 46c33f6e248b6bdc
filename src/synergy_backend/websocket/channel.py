"""
Message channel: validated, persisted, broadcast chat sends.

``send`` persists first and broadcasts only after the store returned the
persisted message. The outcome is returned as a typed result instead of
being pushed through a callback, so the caller decides how to acknowledge.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import anyio
from pydantic import ValidationError

from synergy_types.messages import ChatMessageCreate, ChatMessageGet
from synergy_types.websocket import WSAck, WSMessage, WSSendMessage
from synergy_backend.websocket.connection_manager import Connection, ConnectionManager, ConnectionState
from synergy_backend.websocket.stores import MessageLogStore, MessageStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendSucceeded:
    message: ChatMessageGet
    ref: Optional[str] = None

    @property
    def message_id(self) -> str:
        return self.message.id

    def to_ack(self) -> WSAck:
        return WSAck(ref=self.ref, success=True, message_id=self.message.id)


@dataclass(frozen=True)
class SendFailed:
    error: str
    ref: Optional[str] = None
    code: str = "SEND_FAILED"

    def to_ack(self) -> WSAck:
        return WSAck(ref=self.ref, success=False, error=self.error)


SendResult = Union[SendSucceeded, SendFailed]


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "payload"
        if error["type"] == "extra_forbidden":
            problems.append(f"unexpected field '{field}'")
        else:
            problems.append(f"{field}: {error['msg']}")
    return "Invalid message: " + "; ".join(problems)


class MessageChannel:

    def __init__(self, store: MessageLogStore, manager: ConnectionManager):
        self._store = store
        self._manager = manager

    async def send(self, connection: Connection, payload: dict) -> SendResult:
        """
        Handle one ``message`` event of an admitted connection.

        Author fields always come from the connection's identity. Payloads
        that do not match the send schema, including ones carrying extra
        fields, are rejected without touching the store.
        """
        ref = payload.get("ref") if isinstance(payload.get("ref"), str) else None

        try:
            event = WSSendMessage.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejected send from user {connection.identity.id}: {e.error_count()} validation error(s)")
            return SendFailed(error=_describe_validation_error(e), ref=ref, code="INVALID_MESSAGE")

        draft = ChatMessageCreate(
            project_id=connection.project_id,
            user_id=connection.identity.id,
            username=connection.identity.name,
            content=event.content,
        )

        # Persisted sends are broadcast even if the sender dropped meanwhile
        with anyio.CancelScope(shield=True):
            if connection.state is ConnectionState.ACTIVE:
                connection.state = ConnectionState.SENDING
            try:
                message = await self._store.append(draft)
            except MessageStoreError as e:
                logger.error(f"Send failed for user {connection.identity.id} in project {connection.project_id}: {e}")
                return SendFailed(error=str(e) or "Failed to send message", ref=event.ref)
            finally:
                if connection.state is ConnectionState.SENDING:
                    connection.state = ConnectionState.ACTIVE

            await self._manager.broadcast(connection.project_id, WSMessage.from_message(message))

        return SendSucceeded(message=message, ref=event.ref)
