"""
Signaling wire schemas.

Every frame is a JSON object with a mandatory "type" discriminator. Field names
on the wire are camelCase (roomId, peerId, targetPeerId, ...); the models use
snake_case attributes with camelCase aliases.

Client → server:
    join-room       {roomId}
    offer / answer / ice-candidate   {targetPeerId, ...opaque payload}

Server → client:
    your-peer-id    {peerId}                       first message on every connection
    existing-peers  {roomId, peers: [peerId...]}
    new-peer-joined {roomId, newPeerId}
    joined-room     {roomId, peerId}
    peer-left       {roomId, leavingPeerId, message}
    error           {message}
    offer / answer / ice-candidate   {...original payload, senderPeerId}
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Literal, Optional


# ── Message types ─────────────────────────────────────────────────────────────
JOIN_ROOM = "join-room"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"

YOUR_PEER_ID = "your-peer-id"
EXISTING_PEERS = "existing-peers"
NEW_PEER_JOINED = "new-peer-joined"
JOINED_ROOM = "joined-room"
PEER_LEFT = "peer-left"
ERROR = "error"

RELAY_TYPES = frozenset({OFFER, ANSWER, ICE_CANDIDATE})


# ── Inbound ───────────────────────────────────────────────────────────────────

class JoinRoomRequest(BaseModel):
    """
    roomId is optional at the schema level so that a missing value can be
    reported as "Room ID is required." rather than a generic validation error.
    Length bounds are checked by the router against Settings.max_room_id_length.
    """
    model_config = ConfigDict(extra="ignore")

    type: Literal["join-room"] = JOIN_ROOM
    room_id: Optional[str] = Field(default=None, alias="roomId")


class RelayRequest(BaseModel):
    """
    offer / answer / ice-candidate. Everything besides targetPeerId is opaque
    and is forwarded verbatim from the raw record, not from this model.
    """
    model_config = ConfigDict(extra="allow")

    type: Literal["offer", "answer", "ice-candidate"]
    target_peer_id: Optional[str] = Field(default=None, alias="targetPeerId")


# ── Outbound ──────────────────────────────────────────────────────────────────

class ServerMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class YourPeerIdMessage(ServerMessage):
    type: Literal["your-peer-id"] = YOUR_PEER_ID
    peer_id: str


class ExistingPeersMessage(ServerMessage):
    type: Literal["existing-peers"] = EXISTING_PEERS
    room_id: str
    peers: list[str]


class NewPeerJoinedMessage(ServerMessage):
    type: Literal["new-peer-joined"] = NEW_PEER_JOINED
    room_id: str
    new_peer_id: str


class JoinedRoomMessage(ServerMessage):
    type: Literal["joined-room"] = JOINED_ROOM
    room_id: str
    peer_id: str


class PeerLeftMessage(ServerMessage):
    type: Literal["peer-left"] = PEER_LEFT
    room_id: str
    leaving_peer_id: str
    message: str

    @classmethod
    def for_peer(cls, room_id: str, leaving_peer_id: str) -> "PeerLeftMessage":
        return cls(
            room_id=room_id,
            leaving_peer_id=leaving_peer_id,
            message=f"Peer {leaving_peer_id} has disconnected.",
        )


class ErrorMessage(ServerMessage):
    type: Literal["error"] = ERROR
    message: str


def relay_payload(data: dict[str, Any], sender_peer_id: str) -> dict[str, Any]:
    """
    Copy of the inbound relay record with senderPeerId attached.
    A client-supplied senderPeerId is overwritten so receivers can trust it.
    """
    payload = dict(data)
    payload["senderPeerId"] = sender_peer_id
    return payload
