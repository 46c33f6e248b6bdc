"""
WebSocket Connection Manager.

Owns the group registry: an explicit map from project id to the set of
admitted connections. ``connect`` and ``disconnect`` are the only
mutators; broadcast only reads it.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

import anyio

from synergy_types.auth import Identity
from synergy_types.base import utc_now
from synergy_types.websocket import WSConnected, WSUserLeft, to_frame
from synergy_backend.settings import settings

logger = logging.getLogger(__name__)


class WebSocketMetrics:
    """
    Simple metrics tracking for WebSocket connections.

    Tracks connection counts, frame counts, and error rates.
    """

    def __init__(self):
        self.total_connections = 0
        self.total_disconnections = 0
        self.total_messages_sent = 0
        self.total_messages_received = 0
        self.total_send_errors = 0
        self.total_send_timeouts = 0
        self.total_admission_rejections = 0

    def connection_opened(self):
        self.total_connections += 1

    def connection_closed(self):
        self.total_disconnections += 1

    def message_sent(self):
        self.total_messages_sent += 1

    def message_received(self):
        self.total_messages_received += 1

    def send_error(self):
        self.total_send_errors += 1

    def send_timeout(self):
        self.total_send_timeouts += 1

    def admission_rejected(self):
        self.total_admission_rejections += 1

    def get_metrics(self) -> dict:
        """Get all metrics as a dictionary."""
        return {
            "total_connections": self.total_connections,
            "total_disconnections": self.total_disconnections,
            "active_connections": self.total_connections - self.total_disconnections,
            "total_messages_sent": self.total_messages_sent,
            "total_messages_received": self.total_messages_received,
            "total_send_errors": self.total_send_errors,
            "total_send_timeouts": self.total_send_timeouts,
            "total_admission_rejections": self.total_admission_rejections,
            "error_rate": (
                self.total_send_errors / max(self.total_messages_sent, 1)
            ) if self.total_messages_sent > 0 else 0.0
        }


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    AUTHORIZING = "authorizing"
    ADMITTED = "admitted"
    ACTIVE = "active"
    SENDING = "sending"
    DISCONNECTED = "disconnected"


@dataclass(eq=False)
class Connection:
    """An admitted WebSocket connection bound to exactly one project."""
    websocket: Any
    identity: Identity
    project_id: str
    connected_at: datetime = field(default_factory=utc_now)
    state: ConnectionState = ConnectionState.ADMITTED
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class ConnectionManager:
    """
    Tracks admitted connections per project group.

    Features:
    - Admission acknowledgment to the joining connection only
    - Idempotent disconnect with a ``user_left`` notification to the rest of the group
    - Concurrent fan-out with a per-send timeout
    """

    def __init__(self, send_timeout: Optional[float] = None, metrics: Optional[WebSocketMetrics] = None):
        self._groups: Dict[str, Set[Connection]] = {}  # project_id -> connections
        self._send_timeout = send_timeout if send_timeout is not None else settings.WS_SEND_TIMEOUT
        self.metrics = metrics or WebSocketMetrics()

    async def connect(self, websocket: Any, identity: Identity, project_id: str) -> Connection:
        """
        Accept the transport and add the connection to its project group.

        The ``connected`` event goes out before the connection joins the group,
        so it is always the first frame the client sees.
        """
        await websocket.accept()

        connection = Connection(websocket=websocket, identity=identity, project_id=project_id)

        await self.send_to_connection(connection, WSConnected(
            user_id=identity.id,
            username=identity.name,
            project_id=project_id,
        ))

        self._groups.setdefault(project_id, set()).add(connection)
        connection.state = ConnectionState.ACTIVE
        self.metrics.connection_opened()

        logger.info(
            f"WebSocket connected: user={identity.id}, project={project_id}, "
            f"group_size={len(self._groups[project_id])}, total={self.get_connection_count()}"
        )

        return connection

    async def disconnect(self, connection: Connection) -> None:
        """
        Remove a connection from its group and notify the remaining members.

        Calling it again for the same connection does nothing.
        """
        if connection.state is ConnectionState.DISCONNECTED:
            return
        connection.state = ConnectionState.DISCONNECTED

        project_id = connection.project_id
        group = self._groups.get(project_id)
        if group is None or connection not in group:
            return

        group.discard(connection)
        if not group:
            del self._groups[project_id]

        self.metrics.connection_closed()
        logger.info(f"WebSocket disconnected: user={connection.identity.id}, project={project_id}")

        # Runs from the endpoint's finally block, usually inside a cancelled scope
        with anyio.CancelScope(shield=True):
            await self.broadcast(project_id, WSUserLeft(
                user_id=connection.identity.id,
                username=connection.identity.name,
            ))

    async def _send_with_timeout(self, conn: Connection, data: dict) -> bool:
        """
        Send data to a connection with timeout.

        Returns:
            True if successful, False otherwise
        """
        try:
            await asyncio.wait_for(
                conn.websocket.send_json(data),
                timeout=self._send_timeout
            )
            self.metrics.message_sent()
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Send timeout to user {conn.identity.id}")
            self.metrics.send_timeout()
            return False
        except Exception as e:
            # Transport errors of one peer must not abort a fan-out
            logger.error(f"Failed to send to user {conn.identity.id}: {e}")
            self.metrics.send_error()
            return False

    async def send_to_connection(self, connection: Connection, event) -> bool:
        """Send an event to one connection only."""
        return await self._send_with_timeout(connection, to_frame(event))

    async def broadcast(self, project_id: str, event) -> int:
        """
        Send an event to every connection of a project group concurrently.

        Returns:
            Number of connections the event was delivered to
        """
        connections = list(self._groups.get(project_id, ()))
        if not connections:
            return 0

        data = to_frame(event)
        results = await asyncio.gather(
            *(self._send_with_timeout(conn, data) for conn in connections),
            return_exceptions=True,
        )
        delivered = sum(1 for r in results if r is True)
        logger.debug(f"Broadcast {data.get('type')} to project {project_id}: {delivered}/{len(connections)} delivered")
        return delivered

    async def stop(self):
        """Close every live connection (application shutdown)."""
        logger.info("Stopping ConnectionManager...")

        connections = [conn for group in self._groups.values() for conn in group]
        for conn in connections:
            conn.state = ConnectionState.DISCONNECTED
            self.metrics.connection_closed()

        if connections:
            try:
                await asyncio.wait_for(
                    asyncio.gather(*(self._close_connection_safe(c) for c in connections), return_exceptions=True),
                    timeout=3.0
                )
            except asyncio.TimeoutError:
                logger.warning(f"Timeout closing {len(connections)} WebSocket connections")

        self._groups.clear()
        logger.info("ConnectionManager stopped")

    async def _close_connection_safe(self, conn: Connection):
        try:
            await asyncio.wait_for(conn.websocket.close(code=1001), timeout=1.0)
        except asyncio.TimeoutError:
            logger.debug(f"Timeout closing connection {conn.connection_id}")
        except Exception as e:
            logger.debug(f"Error closing connection {conn.connection_id}: {e}")

    def get_group(self, project_id: str) -> List[Connection]:
        return list(self._groups.get(project_id, ()))

    def get_connection_count(self) -> int:
        return sum(len(group) for group in self._groups.values())

    def get_group_count(self) -> int:
        return len(self._groups)

    def get_metrics(self) -> dict:
        metrics = self.metrics.get_metrics()
        metrics.update({
            "current_connections": self.get_connection_count(),
            "active_groups": self.get_group_count(),
        })
        return metrics
