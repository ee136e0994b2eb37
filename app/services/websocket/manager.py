import asyncio
from typing import Any, Dict, List, Set

from fastapi import WebSocket

from app.core.logging_config import get_logger

logger = get_logger("websocket_manager")


class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}
        # ids of connections with a send in flight
        self._sending: Set[int] = set()
        # fire-and-forget send tasks, kept referenced until done
        self._send_tasks: Set[asyncio.Task] = set()

    def register_topic(self, topic: str):
        """Pre-registers a topic so it appears in the topic list even with no active connections."""
        if topic not in self.active_connections:
            self.active_connections[topic] = []

    def connection_count(self, topic: str) -> int:
        return len(self.active_connections.get(topic, []))

    def reset_active_connections(self):
        for task in list(self._send_tasks):
            task.cancel()
        self._send_tasks.clear()
        self.active_connections.clear()
        self._sending.clear()

    async def connect(self, websocket: WebSocket, topic: str):
        await websocket.accept()
        if topic not in self.active_connections:
            self.active_connections[topic] = []
        self.active_connections[topic].append(websocket)
        logger.info(f"Client connected to '{topic}' ({self.connection_count(topic)} active)")

    def disconnect(self, websocket: WebSocket, topic: str):
        if topic in self.active_connections:
            try:
                self.active_connections[topic].remove(websocket)
            except ValueError:
                pass
            else:
                logger.info(f"Client disconnected from '{topic}' ({self.connection_count(topic)} active)")

    async def _send(self, topic: str, connection: WebSocket, message: Any) -> None:
        # Caller marks the connection busy in _sending.
        try:
            if isinstance(message, bytes):
                await connection.send_bytes(message)
            else:
                await connection.send_json(message)
        except Exception as e:
            logger.debug(f"Dropping connection on '{topic}' after failed send: {e}")
            self.disconnect(connection, topic)
        finally:
            self._sending.discard(id(connection))

    async def send_personal(self, websocket: WebSocket, topic: str, message: Any):
        """Send a message to a single connection on ``topic``."""
        self._sending.add(id(websocket))
        await self._send(topic, websocket, message)

    def _on_send_done(self, task: asyncio.Task) -> None:
        self._send_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Websocket send task failed: {task.exception()}")

    async def broadcast(self, topic: str, message: Any):
        for connection in list(self.active_connections.get(topic, [])):
            if id(connection) in self._sending:
                # Drop this frame for a client still busy with the previous one
                # so a slow consumer never blocks the publisher.
                continue

            self._sending.add(id(connection))
            # Fire and forget instead of awaiting each client
            task = asyncio.create_task(self._send(topic, connection, message))
            self._send_tasks.add(task)
            task.add_done_callback(self._on_send_done)

    async def flush(self) -> None:
        """Wait for every send scheduled so far to finish."""
        if self._send_tasks:
            await asyncio.gather(*list(self._send_tasks), return_exceptions=True)
