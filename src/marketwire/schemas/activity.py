"""Pydantic schemas for listing views and search telemetry."""

from typing import Optional

from pydantic import BaseModel, Field

from marketwire.schemas.common import WireModel, utc_now_iso


class ViewCount(WireModel):
    listing_id: str
    views: int


class SearchTrack(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)


class SearchEvent(WireModel):
    query: str
    user_id: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now_iso)
