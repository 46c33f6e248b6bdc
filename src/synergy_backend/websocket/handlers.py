"""
WebSocket event handlers.

Handles incoming client events of an admitted connection.
"""

import logging

from synergy_types.websocket import WSError
from synergy_backend.websocket.channel import MessageChannel, SendFailed, SendSucceeded
from synergy_backend.websocket.connection_manager import Connection, ConnectionManager

logger = logging.getLogger(__name__)


async def handle_client_message(
    channel: MessageChannel,
    manager: ConnectionManager,
    connection: Connection,
    raw_data,
) -> None:
    """
    Dispatch one decoded frame.

    The only client event is ``message``; its outcome is acknowledged to the
    sender after the broadcast went out.
    """
    if not isinstance(raw_data, dict) or raw_data.get("type") != "message":
        event_type = raw_data.get("type", "missing") if isinstance(raw_data, dict) else type(raw_data).__name__
        await manager.send_to_connection(connection, WSError(
            code="INVALID_EVENT",
            message=f"Unknown or invalid event type: {event_type}"
        ))
        return

    try:
        result = await channel.send(connection, raw_data)
    except Exception as e:
        logger.error(f"Error handling message from user {connection.identity.id}: {e}", exc_info=True)
        ref = raw_data.get("ref") if isinstance(raw_data.get("ref"), str) else None
        result = SendFailed(error="Failed to send message", ref=ref)

    if isinstance(result, SendSucceeded):
        logger.debug(f"Message {result.message_id} sent by user {connection.identity.id}")

    await manager.send_to_connection(connection, result.to_ack())
