"""
WebSocket router: the signaling endpoint.

Clients connect to ws://host/ws. One connection is one peer for its lifetime.

Connection lifecycle:
  1. Server accepts and immediately sends {"type": "your-peer-id", "peerId": "..."}
  2. Client sends join-room / offer / answer / ice-candidate frames (JSON text)
  3. Each frame is handed to the RoomRouter, which replies and relays
  4. On close or transport error the peer is removed from its room and the
     remaining members receive peer-left

There is no authentication: any client may join any room by name.
"""
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.core.dependencies import get_room_router
from app.core.logging_config import get_logger
from app.services.room_router import RoomRouter

logger = get_logger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def signaling_websocket(
    websocket: WebSocket,
    room_router: RoomRouter = Depends(get_room_router),
):
    peer_id = await room_router.connect(websocket)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            # Text frames are the norm; binary frames are decoded as UTF-8 JSON
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""
            await room_router.handle_message(peer_id, raw)

    except WebSocketDisconnect:
        logger.debug(f"WebSocketDisconnect raised for {peer_id}")
    except Exception as e:
        await room_router.handle_error(peer_id, e)
        return

    await room_router.handle_disconnect(peer_id)
