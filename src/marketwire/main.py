"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan owns the process-wide resources: the Redis-backed
ChannelStore and the RealtimeService (with its SubscriptionRegistry) are
built at startup, attached to app.state, and torn down at shutdown.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketwire import __version__
from marketwire.api import api_router
from marketwire.config import settings
from marketwire.realtime.pubsub import ChannelStore, MessagingStoreError
from marketwire.services.realtime_service import RealtimeService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. A Redis outage at startup is logged, not fatal: the pool
    reconnects on demand and reads degrade in the meantime.
    """
    logger.info(
        "marketwire.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    store = ChannelStore.from_url(settings.redis_url)
    try:
        await store.ping()
        logger.info("marketwire.redis_connected", url=settings.redis_url)
    except MessagingStoreError as e:
        logger.warning("marketwire.redis_unavailable", error=str(e))

    realtime = RealtimeService(store)
    app.state.channel_store = store
    app.state.realtime = realtime

    yield

    logger.info("marketwire.shutdown", subscriptions=len(realtime.registry))
    await realtime.cleanup()
    await store.close()
    app.state.realtime = None
    app.state.channel_store = None


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="MarketWire",
        description="Real-time chat, presence, notifications and listing activity for the classifieds marketplace",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → RequestId → handler

    from marketwire.middleware.rate_limit import RateLimitMiddleware
    from marketwire.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    from marketwire.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: marketwire.main:app)
app = create_app()
