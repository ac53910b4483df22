# fpl_squads/middleware/cache_log.py
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("fpl_squads.cache")


class CacheHeaderLogMiddleware(BaseHTTPMiddleware):
    """Logs X-Cache HIT/MISS for routes wrapped by cache_route."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        state = response.headers.get("X-Cache")
        if state:
            logger.info(
                "[CACHE] %s %s stored_at=%s cc=%s",
                request.url.path,
                state,
                response.headers.get("X-Cache-Stored-At"),
                response.headers.get("Cache-Control"),
            )
        return response
