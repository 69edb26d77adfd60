"""Search telemetry API.

Learn: The listing search itself runs in the marketplace API; it posts
each submitted query here. Anonymous searches are tracked without a
user id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from marketwire.auth.dependencies import CurrentIdentity, get_current_user_optional
from marketwire.schemas.activity import SearchEvent, SearchTrack
from marketwire.services.realtime_service import RealtimeService, get_realtime

router = APIRouter()


@router.post("/search/track", status_code=202)
async def track_search(
    body: SearchTrack,
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
    svc: RealtimeService = Depends(get_realtime),
):
    """Record a submitted search query."""
    await svc.search.track_search(body.query, identity.user_id if identity else None)
    return {"message": "Search tracked"}


@router.get("/search/popular", response_model=list[str])
async def popular_searches(
    limit: int = Query(10, ge=1, le=100),
    svc: RealtimeService = Depends(get_realtime),
):
    """Most frequent queries, most popular first."""
    return await svc.search.get_popular_searches(limit)


@router.get("/search/suggestions", response_model=list[str])
async def search_suggestions(
    prefix: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=100),
    svc: RealtimeService = Depends(get_realtime),
):
    """Popular queries starting with prefix."""
    return await svc.search.get_search_suggestions(prefix, limit)


@router.get("/search/recent", response_model=list[SearchEvent])
async def recent_searches(
    limit: int = Query(20, ge=1, le=1000),
    svc: RealtimeService = Depends(get_realtime),
):
    """Latest tracked searches, newest first."""
    return await svc.search.recent_searches(limit)
