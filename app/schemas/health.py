from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    # Live counts from the in-memory room table
    rooms: int
    peers: int
    # Open sockets, including peers that have not joined a room yet
    connections: int
