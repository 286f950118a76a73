"""
Room router: parses inbound frames and dispatches them against the room table.

Every inbound connection event (message, close, transport error) is one call
into this class. All room-table reads/writes AND the delivery of the messages
they produce happen under a single asyncio.Lock, so:
  - concurrent joins/leaves on a room never interleave
  - a room is never deleted for emptiness while a join to it is in flight
  - a member always receives new-peer-joined for X before any relay from X

Failures are scoped to the one message that caused them: SignalingError is
caught at the dispatch boundary and answered with an error frame to the sender.
Connection loss is never reported to the peer that was lost.
"""
import asyncio
import json
from typing import Any, Optional, Union

from fastapi import WebSocket
from pydantic import ValidationError

from app.config import settings
from app.core.exceptions import (
    SignalingError, MalformedMessageError, UnknownMessageTypeError, RoutingError,
    RoomIdRequiredException, InvalidRoomIdException, TargetPeerRequiredException,
)
from app.core.logging_config import get_logger
from app.schemas.signaling import (
    JOIN_ROOM, RELAY_TYPES, JoinRoomRequest, RelayRequest,
    YourPeerIdMessage, ErrorMessage, relay_payload,
)
from app.services.connection_registry import ConnectionRegistry
from app.services.room_table import Outbound, RoomTable

logger = get_logger(__name__)


class RoomRouter:
    def __init__(
        self,
        registry: ConnectionRegistry,
        table: RoomTable,
        max_room_id_length: int = settings.max_room_id_length,
        max_message_bytes: int = settings.max_message_bytes,
    ):
        self.registry = registry
        self.table = table
        self.max_room_id_length = max_room_id_length
        self.max_message_bytes = max_message_bytes
        # One mutual-exclusion domain for the whole room table
        self._lock = asyncio.Lock()

    @property
    def room_count(self) -> int:
        return self.table.room_count

    @property
    def peer_count(self) -> int:
        return self.table.peer_count

    @property
    def connection_count(self) -> int:
        return self.registry.connection_count

    # ── Connection events ─────────────────────────────────────────────────────

    async def connect(self, websocket: WebSocket) -> str:
        """Register a new connection and send it its identity before anything else."""
        peer_id = await self.registry.connect(websocket)
        async with self._lock:
            self.table.add_peer(peer_id)
        await self.registry.send(peer_id, YourPeerIdMessage(peer_id=peer_id).to_wire())
        return peer_id

    async def handle_disconnect(self, peer_id: str) -> None:
        await self._drop(peer_id)

    async def handle_error(self, peer_id: str, error: Optional[BaseException] = None) -> None:
        """Transport error: same cleanup as a disconnect, then close the socket if it is still up."""
        logger.error(f"WebSocket error for {peer_id}: {error}", exc_info=error)
        await self.registry.close(peer_id, code=1011)
        await self._drop(peer_id)

    async def _drop(self, peer_id: str) -> None:
        # Room cleanup runs before the identity is discarded
        async with self._lock:
            outbound = self.table.remove_peer(peer_id, is_open=self.registry.is_open)
            await self._deliver(outbound)
        self.registry.disconnect(peer_id)

    async def shutdown(self) -> None:
        """Close every live connection. Used by the app lifespan on process stop."""
        for peer_id in list(self.registry.active_connections):
            await self.registry.close(peer_id, code=1001)
            await self._drop(peer_id)
        logger.info("Room router shut down")

    # ── Message events ────────────────────────────────────────────────────────

    async def handle_message(self, peer_id: str, raw: Union[str, bytes]) -> None:
        """
        Parse one inbound frame and dispatch it.

        Malformed input, protocol violations and routing failures are all
        answered with an error frame to the sender and leave state untouched.
        """
        try:
            data = self.parse(raw)
            message_type = data["type"]
            logger.debug(f"Received message: {message_type} from {peer_id}")

            if message_type == JOIN_ROOM:
                await self._handle_join(peer_id, data)
            elif message_type in RELAY_TYPES:
                await self._handle_relay(peer_id, data)
            else:
                raise UnknownMessageTypeError(message_type)
        except SignalingError as e:
            logger.warning(f"Rejected message from {peer_id}: {e.detail}")
            await self.registry.send(peer_id, ErrorMessage(message=e.detail).to_wire())

    def parse(self, raw: Union[str, bytes]) -> dict[str, Any]:
        if isinstance(raw, bytes):
            if len(raw) > self.max_message_bytes:
                raise MalformedMessageError(f"Message exceeds {self.max_message_bytes} bytes.")
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise MalformedMessageError()
        elif len(raw.encode("utf-8")) > self.max_message_bytes:
            raise MalformedMessageError(f"Message exceeds {self.max_message_bytes} bytes.")

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError):
            # RecursionError: nesting deeper than the decoder can follow
            raise MalformedMessageError()

        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            raise MalformedMessageError("Message must be a JSON object with a string 'type' field.")
        return data

    async def _handle_join(self, peer_id: str, data: dict[str, Any]) -> None:
        try:
            request = JoinRoomRequest.model_validate(data)
        except ValidationError:
            raise InvalidRoomIdException(self.max_room_id_length)

        room_id = request.room_id
        if not room_id:
            raise RoomIdRequiredException()
        if len(room_id) > self.max_room_id_length:
            raise InvalidRoomIdException(self.max_room_id_length)

        async with self._lock:
            outbound = self.table.join(peer_id, room_id, is_open=self.registry.is_open)
            await self._deliver(outbound)

    async def _handle_relay(self, peer_id: str, data: dict[str, Any]) -> None:
        try:
            request = RelayRequest.model_validate(data)
        except ValidationError:
            raise TargetPeerRequiredException()

        target_peer_id = request.target_peer_id
        if not target_peer_id:
            raise TargetPeerRequiredException()

        async with self._lock:
            room_id = self.table.relay_room(peer_id, target_peer_id)
            if not self.registry.is_open(target_peer_id):
                raise RoutingError(target_peer_id)
            delivered = await self.registry.send(target_peer_id, relay_payload(data, peer_id))

        if not delivered:
            raise RoutingError(target_peer_id)
        logger.debug(f"Relayed {request.type} from {peer_id} to {target_peer_id} in room {room_id}")

    async def _deliver(self, outbound: list[Outbound]) -> None:
        for item in outbound:
            await self.registry.send(item.peer_id, item.message)
