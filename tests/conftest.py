import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from app.main import create_app
from app.services.connection_registry import ConnectionRegistry
from app.services.room_router import RoomRouter
from app.services.room_table import RoomTable


class FakeWebSocket:
    """Stands in for a starlette WebSocket: records what is sent, tracks both socket states."""

    def __init__(self):
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.sent: list[dict] = []
        self.close_code = None
        self.fail_sends = False

    async def accept(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, data):
        if self.fail_sends:
            raise RuntimeError("connection reset by peer")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.application_state = WebSocketState.DISCONNECTED
        self.close_code = code

    def drop(self):
        """Simulate the remote side going away without the server noticing yet."""
        self.client_state = WebSocketState.DISCONNECTED

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]

    def of_type(self, message_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == message_type]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def table():
    return RoomTable()


@pytest.fixture
def room_router(registry, table):
    return RoomRouter(registry, table, max_room_id_length=32, max_message_bytes=1024)


@pytest.fixture
def connect(room_router):
    """Factory: connect a fake peer through the router, returns (peer_id, websocket)."""
    async def _connect():
        ws = FakeWebSocket()
        peer_id = await room_router.connect(ws)
        return peer_id, ws
    return _connect


@pytest.fixture
def client():
    app = create_app()
    # Context manager runs the lifespan, which creates the room router
    with TestClient(app) as test_client:
        yield test_client
