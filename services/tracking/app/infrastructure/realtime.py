from typing import Any, Dict, Set
from fastapi import WebSocket
from starlette.websockets import WebSocketState
from shared.core import get_logger

logger = get_logger(__name__)

class ConnectionRegistry:
    """Open WebSocket connections that receive broadcast envelopes.

    Used only from the event loop, so no locking is needed.
    """

    def __init__(self):
        self._connections: Set[WebSocket] = set()

    def add(self, websocket: WebSocket) -> None:
        self._connections.add(websocket)
        logger.info(f"WebSocket connected ({len(self._connections)} open)")

    def remove(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info(f"WebSocket disconnected ({len(self._connections)} open)")

    def __len__(self) -> int:
        return len(self._connections)

    @staticmethod
    def _is_open(websocket: WebSocket) -> bool:
        return (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        )

    async def broadcast(self, message_type: str, data: Dict[str, Any]) -> int:
        """Send ``{type, data}`` to every open connection; returns the delivery count."""
        envelope = {"type": message_type, "data": data}
        delivered = 0
        for websocket in list(self._connections):
            if not self._is_open(websocket):
                self._connections.discard(websocket)
                continue
            try:
                await websocket.send_json(envelope)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping WebSocket after failed send: {e}")
                self._connections.discard(websocket)
        logger.info(
            f"Broadcast {message_type}",
            extra={'extra_fields': {'type': message_type, 'delivered': delivered}},
        )
        return delivered
