"""
WebSocket connection registry.

Owns the set of live connections and hands out peer identities.
The websocket handle is kept opaque: peer state (room membership) lives in the
RoomTable, keyed by the same peer_id, never on the websocket object itself.

No retries at this layer: a closed connection is a terminal fact, not a
transient failure. send() to a closed or unknown peer is a silent no-op.
"""
import uuid
from typing import Any, Dict

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from app.core.logging_config import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    def __init__(self):
        # Maps peer_id (str) → the peer's WebSocket connection
        self.active_connections: Dict[str, WebSocket] = {}

    def __contains__(self, peer_id: str) -> bool:
        return peer_id in self.active_connections

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    def _new_peer_id(self) -> str:
        # Unique among live peers; may repeat after a peer fully disconnects.
        peer_id = str(uuid.uuid4())
        while peer_id in self:
            peer_id = str(uuid.uuid4())
        return peer_id

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a new WebSocket connection and register it under a fresh peer_id.
        The caller must deliver the identity (your-peer-id) before processing
        any further messages from this connection.
        """
        await websocket.accept()
        peer_id = self._new_peer_id()
        self.active_connections[peer_id] = websocket
        logger.info(f"Client connected: {peer_id} (total={len(self.active_connections)})")
        return peer_id

    def is_open(self, peer_id: str) -> bool:
        """True only if the peer is registered and both sides of its socket are still connected."""
        websocket = self.active_connections.get(peer_id)
        if websocket is None:
            return False
        return (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, peer_id: str, message: dict[str, Any]) -> bool:
        """
        Deliver a JSON message to the named peer if its connection is open.

        Returns True on delivery, False if the peer was closed, unknown, or the
        transport failed mid-send. Callers that must report a failure to a sender
        check is_open() before calling.
        """
        if not self.is_open(peer_id):
            logger.debug(f"Dropping {message.get('type')} to closed or unknown peer {peer_id}")
            return False

        try:
            await self.active_connections[peer_id].send_json(message)
        except Exception as e:
            # Connection is broken; its own receive loop will run cleanup
            logger.warning(f"Send of {message.get('type')} to {peer_id} failed: {e}")
            return False
        return True

    async def close(self, peer_id: str, code: int = 1000) -> None:
        """Close the peer's socket if it is still open. The identity stays registered."""
        if not self.is_open(peer_id):
            return
        try:
            await self.active_connections[peer_id].close(code=code)
        except Exception as e:
            logger.debug(f"Error closing WebSocket for {peer_id}: {e}")

    def disconnect(self, peer_id: str) -> None:
        """Discard the identity. Room cleanup must already have run."""
        if self.active_connections.pop(peer_id, None) is not None:
            logger.info(f"Client disconnected: {peer_id} (total={len(self.active_connections)})")
