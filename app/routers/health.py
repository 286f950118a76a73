from fastapi import APIRouter, Depends, Request

from app.config import settings
from app.core.dependencies import get_room_router
from app.core.rate_limiter import limiter
from app.schemas.health import HealthResponse
from app.services.room_router import RoomRouter

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@limiter.limit(settings.health_rate_limit)
async def health_check(
    request: Request,
    room_router: RoomRouter = Depends(get_room_router),
):
    """
    Simple health check endpoint for load balancers and Docker health checks.
    Also reports how many rooms and peers are currently live.
    """
    return HealthResponse(
        status="ok",
        version=settings.app_version,
        rooms=room_router.room_count,
        peers=room_router.peer_count,
        connections=room_router.connection_count,
    )
