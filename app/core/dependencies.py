"""
FastAPI dependencies used across routers.
Keep this file lean — business logic belongs in services/.
"""
from fastapi.requests import HTTPConnection

from app.services.room_router import RoomRouter


def get_room_router(connection: HTTPConnection) -> RoomRouter:
    """
    Returns the RoomRouter created by the app lifespan.

    HTTPConnection covers both Request and WebSocket, so the same dependency
    serves the signaling endpoint and the health check.
    """
    return connection.app.state.room_router
