"""Listing activity API — record a view, read the counter."""

from fastapi import APIRouter, Depends

from marketwire.schemas.activity import ViewCount
from marketwire.services.realtime_service import RealtimeService, get_realtime

router = APIRouter()


@router.post("/listings/{listing_id}/view", response_model=ViewCount)
async def record_view(
    listing_id: str,
    svc: RealtimeService = Depends(get_realtime),
):
    """Count a listing page view and return the current total."""
    await svc.listings.increment_views(listing_id)
    return ViewCount(listing_id=listing_id, views=await svc.listings.get_views(listing_id))


@router.get("/listings/{listing_id}/views", response_model=ViewCount)
async def get_views(
    listing_id: str,
    svc: RealtimeService = Depends(get_realtime),
):
    return ViewCount(listing_id=listing_id, views=await svc.listings.get_views(listing_id))
