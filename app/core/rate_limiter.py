"""
Rate limiting for the HTTP side of the relay.

slowapi only sees plain HTTP routes; the /ws signaling socket is not covered.
Limits come from Settings so they can be tuned per deployment:
    DEFAULT_RATE_LIMIT   any HTTP route without its own limit (via SlowAPIMiddleware)
    HEALTH_RATE_LIMIT    /health (see routers/health.py)

Decorated endpoints must take `request: Request`, and @limiter.limit goes
below the @router.<method> decorator.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.default_rate_limit],
)
