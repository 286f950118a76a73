from dataclasses import dataclass, field

from app.models.peer import Peer


@dataclass
class Room:
    """
    A named group of peers that may relay negotiation messages to each other.

    members keeps insertion order (plain dict), so the "existing peers" list
    sent to a joiner is deterministic: oldest member first.
    """
    room_id: str
    members: dict[str, Peer] = field(default_factory=dict)

    def __contains__(self, peer_id: str) -> bool:
        return peer_id in self.members

    def __len__(self) -> int:
        return len(self.members)

    @property
    def is_empty(self) -> bool:
        return not self.members

    def member_ids(self) -> list[str]:
        return list(self.members)
