from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # ── App ───────────────────────────────────────────────────
    app_name: str = "Signaling Relay"
    app_version: str = "1.0.0"
    cors_origins: str = "*"

    # ── Logging ───────────────────────────────────────────────
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # ── Signaling limits ──────────────────────────────────────
    # roomId is chosen by clients and otherwise unvalidated, so bound it here.
    max_room_id_length: int = 128
    max_message_bytes: int = 65536

    # ── Rate limiting (HTTP surface only) ─────────────────────
    default_rate_limit: str = "120/minute"
    health_rate_limit: str = "60/minute"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split comma-separated origins into a list, stripping whitespace."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    class Config:
        env_file = ".env"
        # Case-insensitive so LOG_LEVEL and log_level both work
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings loader — reads .env once and reuses.
    Use this everywhere instead of instantiating Settings() directly.
    """
    return Settings()


# Module-level singleton for convenience imports
settings = get_settings()
