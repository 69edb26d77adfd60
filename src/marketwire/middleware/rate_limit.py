"""Rate limiting middleware — Redis fixed-window counter per client IP.

Learn: Each IP gets a counter key rate_limit:{ip}:{window} where window is
the current time divided by the window length. The first hit in a window
sets an expiry so old counters vanish on their own. Default budget is 100
requests per 15 minutes.

Gracefully skips rate limiting if no ChannelStore is attached to the app
(e.g., in tests) or when Redis errors. A limiter outage must not take the
API down with it.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from marketwire.realtime.keys import rate_limit_key
from marketwire.realtime.pubsub import MessagingStoreError

logger = structlog.get_logger()

EXEMPT_PATHS = ("/api/v1/health",)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per fixed window."""

    def __init__(self, app, limit: int = 100, window_seconds: int = 900):
        super().__init__(app)
        self.limit = limit
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        store = getattr(request.app.state, "channel_store", None)
        if store is None or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = rate_limit_key(client_ip, window)

        try:
            count = await store.increment(key)
            if count == 1:
                await store.expire(key, self.window_seconds)
        except MessagingStoreError as e:
            logger.warning("rate_limit.unavailable", error=str(e))
            return await call_next(request)

        if count > self.limit:
            retry_after = self.window_seconds - int(time.time() % self.window_seconds)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later."},
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.limit - count))
        return response
