# /mediafetch/services/notifier.py
import logging
from typing import Any, Dict, Set

from starlette.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)


class NotificationHub:
    def __init__(self):
        self.connections: Set[WebSocket] = set()

    def register(self, connection: WebSocket) -> None:
        self.connections.add(connection)

    def unregister(self, connection: WebSocket) -> None:
        self.connections.discard(connection)

    async def broadcast(self, event: Dict[str, Any]) -> int:
        """
        Send `event` as JSON to every open connection.
        Returns how many connections it was delivered to.
        """
        delivered = 0
        # snapshot: handlers may register/unregister while we await sends
        for connection in list(self.connections):
            if connection.client_state != WebSocketState.CONNECTED:
                continue
            try:
                await connection.send_json(event)
            except Exception as e:
                logger.warning("Dropping client after failed send: %s", e)
                self.unregister(connection)
                continue
            delivered += 1
        return delivered

    async def progress(self, percent: str) -> int:
        return await self.broadcast({"type": "progress", "progress": percent})

    async def canceled(self) -> int:
        return await self.broadcast({"type": "canceled"})
