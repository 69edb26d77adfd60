"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Identity is resolved per route (get_current_user or
get_current_user_optional) rather than at include_router level, because
several routers mix user-scoped and public routes.
"""

from fastapi import APIRouter

from marketwire.api.chats import router as chats_router
from marketwire.api.health import router as health_router
from marketwire.api.listings import router as listings_router
from marketwire.api.notifications import router as notifications_router
from marketwire.api.presence import router as presence_router
from marketwire.api.search import router as search_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(chats_router, tags=["chats"])
api_router.include_router(presence_router, tags=["presence"])
api_router.include_router(notifications_router, tags=["notifications"])
api_router.include_router(listings_router, tags=["listings"])
api_router.include_router(search_router, tags=["search"])
