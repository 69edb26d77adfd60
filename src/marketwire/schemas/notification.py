"""Pydantic schemas for the per-user notification inbox.

Learn: Notifications are returned newest-first (storage order), unlike chat
messages which are reversed into chronological order. The inbox UI shows
the most recent notification at the top.
"""

from typing import Any

from pydantic import BaseModel, Field

from marketwire.schemas.common import WireModel, new_event_id, utc_now_iso


class NotificationSpec(BaseModel):
    """Producer-supplied part of a notification."""
    title: str = Field(..., min_length=1)
    message: str = ""
    type: str = Field("info", description="info, message, listing, payment, ...")
    data: dict[str, Any] = Field(default_factory=dict)


class Notification(WireModel):
    id: str = Field(default_factory=new_event_id)
    user_id: str
    title: str
    message: str
    type: str = "info"
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=utc_now_iso)
    read: bool = False


class UnreadCount(BaseModel):
    unread: int
