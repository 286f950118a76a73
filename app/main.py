"""
Application entry point.

Run locally:
    uvicorn app.main:app --reload --port 8080

In Docker:
    CMD ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", "8080"]

Signaling endpoint:
    ws://localhost:8080/ws
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings
from app.core.logging_config import get_logger, setup_logging
from app.core.rate_limiter import limiter
from app.routers import health, websocket
from app.services.connection_registry import ConnectionRegistry
from app.services.room_router import RoomRouter
from app.services.room_table import RoomTable

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The room table lives exactly as long as the process: created here,
    # handed to the router explicitly, torn down on shutdown.
    app.state.room_router = RoomRouter(
        registry=ConnectionRegistry(),
        table=RoomTable(),
        max_room_id_length=settings.max_room_id_length,
        max_message_bytes=settings.max_message_bytes,
    )
    logger.info("Signaling relay started")
    yield
    await app.state.room_router.shutdown()


def create_app() -> FastAPI:
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)

    app = FastAPI(
        title=settings.app_name,
        description=(
            "WebSocket signaling relay. Peers join named rooms and exchange "
            "offers, answers and ICE candidates so they can connect directly."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )

    # ── Rate Limiter ──────────────────────────────────────────────────────────
    # Attach limiter to app state (required by slowapi)
    # Register the 429 handler so exceeded limits return proper JSON
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    # Applies DEFAULT_RATE_LIMIT to HTTP routes without their own limit;
    # websocket scopes pass straight through
    app.add_middleware(SlowAPIMiddleware)

    # ── CORS ──────────────────────────────────────────────────────────────────
    # CORS_ORIGINS in .env is a comma-separated list; "*" allows any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(health.router, tags=["Health"])

    # WebSocket (no prefix — clients connect to the full path /ws)
    app.include_router(websocket.router, tags=["WebSocket"])

    return app


app = create_app()
