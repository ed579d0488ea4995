# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Manages WebSocket connections per shopper and pushes selection updates.
#
# Every push carries the full selection snapshot, never a delta, so a client
# can always re-render from what it receives.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(user_id, websocket)
#   await websocket_manager.broadcast(user_id, {"type": "selection_updated", ...})
#   websocket_manager.disconnect(user_id, websocket)
# =============================================================================

import asyncio
import logging
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages WebSocket connections organized by user ID.

    A shopper can have several tabs open; each one gets the update.
    """

    def __init__(self):
        # user_id -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._total_connections = 0
        # Scheduled pushes, held until they finish
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection and track it."""
        await websocket.accept()

        self.connections.setdefault(user_id, set()).add(websocket)
        self._total_connections += 1

        logger.info(
            f"WebSocket connected for user {user_id}. "
            f"Total connections: {self._total_connections}"
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from tracking."""
        if websocket in self.connections.get(user_id, set()):
            self.connections[user_id].discard(websocket)
            self._total_connections -= 1

            if not self.connections[user_id]:
                del self.connections[user_id]

        logger.info(
            f"WebSocket disconnected for user {user_id}. "
            f"Total connections: {self._total_connections}"
        )

    async def broadcast(self, user_id: str, message: dict) -> int:
        """
        Send a message to every connection of a user.

        Returns:
            int: Number of clients the message was sent to
        """
        if user_id not in self.connections:
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections[user_id]):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.disconnect(user_id, ws)

        logger.debug(
            f"Broadcast to user {user_id}: "
            f"type={message.get('type')}, sent to {sent_count} clients"
        )
        return sent_count

    def get_connection_count(self, user_id: str | None = None) -> int:
        if user_id:
            return len(self.connections.get(user_id, set()))
        return self._total_connections

    def notify_selection_changed(self, user_id: str, snapshot: dict[str, Any]) -> None:
        """
        Selection change listener.

        Called synchronously from the service layer; schedules the push on
        the running event loop. Outside an event loop there is nobody
        connected, so nothing is sent.
        """
        if user_id not in self.connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(
            self.broadcast(user_id, {"type": "selection_updated", **snapshot})
        )
        self._pending.add(task)
        task.add_done_callback(self._push_done)

    def _push_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Selection push failed: {task.exception()}")


# Global singleton instance
websocket_manager = ConnectionManager()
