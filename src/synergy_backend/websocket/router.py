"""
WebSocket router and endpoint.

Provides the FastAPI WebSocket endpoint for project chat.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from synergy_types.websocket import WSError, to_frame
from synergy_backend.websocket.connection_manager import Connection, ConnectionState
from synergy_backend.websocket.errors import AdmissionError
from synergy_backend.websocket.handlers import handle_client_message
from synergy_backend.websocket.service import ChatService

logger = logging.getLogger(__name__)

ws_router = APIRouter()


@ws_router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None, description="Bearer token for authentication"),
    project_id: Optional[str] = Query(None, alias="projectId", description="Project whose chat to join"),
):
    """
    Project chat endpoint.

    Example: ws://localhost:8000/ws?token=<token>&projectId=<project id>

    Connection Flow:
        1. Server validates the token (authenticating)
        2. Server checks owner/member access to the project (authorizing)
        3. Server accepts and sends ``connected`` (admitted)
        4. Client sends messages, server persists, broadcasts and acks (active/sending)

        Any admission failure sends one ``error`` frame and closes the socket
        (4001 authentication, 4003 not authorized, 4004 project not found).

    Client -> Server Events:
        - message: {"type": "message", "content": "hello team", "ref": "c1"}

    Server -> Client Events:
        - connected: {"type": "connected", "message", "userId", "username", "projectId"}
        - error: {"type": "error", "code", "message"}
        - message: {"type": "message", "_id", "projectId", "userId", "username", "content", "timestamp"}
        - ack: {"type": "ack", "ref", "success": true, "messageId"} or {..., "success": false, "error"}
        - user_left: {"type": "user_left", "userId", "username", "timestamp"}
    """
    chat: ChatService = websocket.app.state.chat
    connection: Optional[Connection] = None
    _set_state(websocket, ConnectionState.CONNECTING)

    try:
        _set_state(websocket, ConnectionState.AUTHENTICATING)
        identity = await chat.authenticator.authenticate(token)

        _set_state(websocket, ConnectionState.AUTHORIZING)
        await chat.guard.admit(identity, project_id)

        _set_state(websocket, ConnectionState.ADMITTED)
        connection = await chat.manager.connect(websocket, identity, project_id)

        await _receive_loop(chat, connection)

    except AdmissionError as e:
        logger.warning(f"WebSocket admission failed ({e.code}): {e.message}")
        chat.manager.metrics.admission_rejected()
        await _reject(websocket, e.code, e.message, e.close_code)

    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
        if connection is None:
            await _reject(websocket, "CONNECTION_FAILED", "Connection failed", 1011)
        else:
            await _close_quietly(websocket, 1011)

    finally:
        _set_state(websocket, ConnectionState.DISCONNECTED)
        if connection is not None:
            await chat.manager.disconnect(connection)


def _set_state(websocket: WebSocket, state: ConnectionState) -> None:
    """Stage of the session before a ``Connection`` exists; admitted ones track their own."""
    websocket.state.connection_state = state


async def _receive_loop(chat: ChatService, connection: Connection) -> None:
    """
    Handle frames of one connection strictly one at a time.

    Each handler is awaited before the next frame is read, which keeps acks
    in submission order.
    """
    websocket = connection.websocket
    user_id = connection.identity.id

    while True:
        try:
            message = await websocket.receive()
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: user={user_id}")
            return

        if message["type"] == "websocket.disconnect":
            logger.info(f"WebSocket disconnected: user={user_id}, code={message.get('code')}")
            return

        if message["type"] != "websocket.receive":
            continue

        chat.manager.metrics.message_received()
        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes")

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"WebSocket invalid JSON from user={user_id}: {e}")
            await chat.manager.send_to_connection(connection, WSError(
                code="INVALID_JSON",
                message="Message must be valid JSON"
            ))
            continue

        await handle_client_message(chat.channel, chat.manager, connection, data)


async def _reject(websocket: WebSocket, code: str, message: str, close_code: int) -> None:
    """Accept, report the admission failure and close."""
    try:
        await websocket.accept()
        await websocket.send_json(to_frame(WSError(code=code, message=message)))
        await websocket.close(code=close_code, reason=message)
    except Exception as e:
        logger.debug(f"Client went away before the error frame was delivered: {e}")


async def _close_quietly(websocket: WebSocket, close_code: int) -> None:
    try:
        await websocket.close(code=close_code, reason="Internal error")
    except Exception as e:
        logger.debug(f"Close after internal error failed: {e}")
