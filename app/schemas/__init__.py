from app.schemas.signaling import (
    JoinRoomRequest, RelayRequest, ServerMessage,
    YourPeerIdMessage, ExistingPeersMessage, NewPeerJoinedMessage,
    JoinedRoomMessage, PeerLeftMessage, ErrorMessage, relay_payload
)
from app.schemas.health import HealthResponse
