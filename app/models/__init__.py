# models/__init__.py
# In-memory records only: nothing here is persisted across restarts.

from app.models.peer import Peer
from app.models.room import Room

__all__ = [
    "Peer",
    "Room",
]
