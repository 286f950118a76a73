"""
Room table: roomId → members, and peerId → current room.

This is plain synchronous bookkeeping with no I/O. Every mutating operation
returns the list of Outbound messages it produced, in the order they must be
delivered. The RoomRouter holds one lock around each call and the delivery of
its result, so nothing here needs its own synchronisation.

Invariants kept by this class:
  - a peer is in at most one room
  - a room is present in `rooms` iff it has at least one member
  - the existing-peers snapshot sent to a joiner is taken before the joiner
    is inserted, and new-peer-joined is produced only after insertion
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.core.exceptions import NotInRoomException, RoutingError
from app.core.logging_config import get_logger
from app.models.peer import Peer
from app.models.room import Room
from app.schemas.signaling import (
    ExistingPeersMessage, JoinedRoomMessage, NewPeerJoinedMessage, PeerLeftMessage
)

logger = get_logger(__name__)

LivenessCheck = Callable[[str], bool]


def _always_open(peer_id: str) -> bool:
    return True


@dataclass(frozen=True)
class Outbound:
    peer_id: str
    message: dict[str, Any]


class RoomTable:
    def __init__(self):
        self.rooms: dict[str, Room] = {}
        self.peers: dict[str, Peer] = {}

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    @property
    def peer_count(self) -> int:
        return len(self.peers)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def current_room(self, peer_id: str) -> Optional[str]:
        peer = self.peers.get(peer_id)
        return peer.current_room_id if peer else None

    # ── Peer lifecycle ────────────────────────────────────────────────────────

    def add_peer(self, peer_id: str) -> Peer:
        peer = Peer(peer_id=peer_id)
        self.peers[peer_id] = peer
        return peer

    def remove_peer(self, peer_id: str, is_open: LivenessCheck = _always_open) -> list[Outbound]:
        """Leave the current room (if any) and forget the peer. Safe to call twice."""
        outbound = self.leave(peer_id, is_open)
        self.peers.pop(peer_id, None)
        return outbound

    # ── Join / leave ──────────────────────────────────────────────────────────

    def join(self, peer_id: str, room_id: str, is_open: LivenessCheck = _always_open) -> list[Outbound]:
        """
        Move a peer into room_id, creating the room if needed.

        Produces, in order:
          1. peer-left to the old room's members (only when switching rooms)
          2. existing-peers to the joiner (snapshot taken before insertion)
          3. new-peer-joined to every other open member
          4. joined-room to the joiner

        Re-joining the room the peer is already in changes nothing and only
        repeats (2) and (4).
        """
        peer = self.peers.get(peer_id)
        if peer is None:
            # Already dropped (disconnect or shutdown won the lock first)
            return []
        outbound: list[Outbound] = []

        if peer.current_room_id == room_id:
            others = [m for m in self.rooms[room_id].member_ids() if m != peer_id]
            logger.info(f"Client {peer_id} re-joined room {room_id}")
            return [
                Outbound(peer_id, ExistingPeersMessage(room_id=room_id, peers=others).to_wire()),
                Outbound(peer_id, JoinedRoomMessage(room_id=room_id, peer_id=peer_id).to_wire()),
            ]

        if peer.in_room:
            outbound.extend(self.leave(peer_id, is_open))

        room = self.get_room(room_id)
        if room is None:
            room = Room(room_id=room_id)
            self.rooms[room_id] = room
            logger.info(f"Room {room_id} created")

        existing = room.member_ids()
        outbound.append(
            Outbound(peer_id, ExistingPeersMessage(room_id=room_id, peers=existing).to_wire())
        )

        room.members[peer_id] = peer
        peer.current_room_id = room_id
        logger.info(f"Client {peer_id} joined room: {room_id}. Current clients in room: {len(room)}")

        notice = NewPeerJoinedMessage(room_id=room_id, new_peer_id=peer_id).to_wire()
        for member_id in existing:
            if is_open(member_id):
                outbound.append(Outbound(member_id, notice))

        outbound.append(
            Outbound(peer_id, JoinedRoomMessage(room_id=room_id, peer_id=peer_id).to_wire())
        )
        return outbound

    def leave(self, peer_id: str, is_open: LivenessCheck = _always_open) -> list[Outbound]:
        """
        Remove a peer from its current room.

        Shared by room switching, disconnect and transport error. Deletes the
        room when it becomes empty, otherwise notifies each remaining open
        member with peer-left. Members whose connection is closed are skipped:
        they are being torn down themselves.
        """
        peer = self.peers.get(peer_id)
        if peer is None or not peer.in_room:
            return []

        room_id = peer.current_room_id
        room = self.get_room(room_id)
        outbound: list[Outbound] = []

        if room is not None:
            room.members.pop(peer_id, None)
            logger.info(f"Client {peer_id} left room: {room_id}. Remaining clients: {len(room)}")

            if room.is_empty:
                del self.rooms[room_id]
                logger.info(f"Room {room_id} is now empty and removed.")
            else:
                notice = PeerLeftMessage.for_peer(room_id, peer_id).to_wire()
                for member_id in room.member_ids():
                    if is_open(member_id):
                        outbound.append(Outbound(member_id, notice))

        peer.current_room_id = None
        return outbound

    # ── Relay routing ─────────────────────────────────────────────────────────

    def relay_room(self, sender_id: str, target_peer_id: str) -> str:
        """
        Return the room a relay from sender to target travels through.

        Raises NotInRoomException if the sender has no room, and RoutingError
        if the target is not a member of the sender's room. Liveness of the
        target is the caller's check.
        """
        room_id = self.current_room(sender_id)
        room = self.get_room(room_id) if room_id else None
        if room is None:
            raise NotInRoomException()
        if target_peer_id not in room:
            raise RoutingError(target_peer_id)
        return room_id
