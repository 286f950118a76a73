from dataclasses import dataclass
from typing import Optional


@dataclass
class Peer:
    """
    One connected client.

    peer_id is assigned by the ConnectionRegistry at connect time and never
    changes. current_room_id is None while the peer has not joined a room.
    The websocket handle is deliberately not stored here: the registry owns it.
    """
    peer_id: str
    current_room_id: Optional[str] = None

    @property
    def in_room(self) -> bool:
        return self.current_room_id is not None
