"""Realtime service — the one object the API and WebSocket layers talk to.

Learn: Built once in the application lifespan from a ChannelStore. It
composes the five managers and the SubscriptionRegistry so route handlers
depend on a single thing, and `cleanup()` at shutdown releases every
subscription the process opened.
"""

from typing import Optional

import structlog
from fastapi import HTTPException, Request

from marketwire.realtime.keys import (
    PRESENCE_CHANNEL,
    chat_channel,
    chat_logical_key,
    listing_channel,
    listing_logical_key,
    notifications_channel,
    user_logical_key,
)
from marketwire.realtime.pubsub import ChannelStore, EventHandler, Subscription
from marketwire.realtime.subscriptions import SubscriptionRegistry
from marketwire.services.listing_activity import ListingActivity
from marketwire.services.message_service import MessageLog
from marketwire.services.notification_service import NotificationCenter
from marketwire.services.policy import governed
from marketwire.services.presence_service import PresenceTracker
from marketwire.services.search_telemetry import SearchTelemetry

logger = structlog.get_logger()


class RealtimeService:
    """Facade over the messaging, presence, notification and telemetry managers."""

    def __init__(
        self,
        store: ChannelStore,
        registry: Optional[SubscriptionRegistry] = None,
    ):
        self.store = store
        self.registry = registry or SubscriptionRegistry(store)
        self.messages = MessageLog(store)
        self.presence = PresenceTracker(store)
        self.notifications = NotificationCenter(store)
        self.listings = ListingActivity(store)
        self.search = SearchTelemetry(store)

    # ─── Subscriptions ────────────────────────────────────

    @governed("subscribe")
    async def subscribe(self, logical_key: str, channel: str, on_event: EventHandler) -> Subscription:
        return await self.registry.subscribe(logical_key, channel, on_event)

    async def subscribe_to_user_updates(self, user_id: str, on_event: EventHandler) -> Subscription:
        """Deliver the user's new_notification events."""
        return await self.subscribe(user_logical_key(user_id), notifications_channel(user_id), on_event)

    async def subscribe_to_chat(self, chat_id: str, on_event: EventHandler) -> Subscription:
        """Deliver new_message events for one conversation."""
        return await self.subscribe(chat_logical_key(chat_id), chat_channel(chat_id), on_event)

    async def subscribe_to_listing(self, listing_id: str, on_event: EventHandler) -> Subscription:
        """Deliver view_update events for one listing."""
        return await self.subscribe(listing_logical_key(listing_id), listing_channel(listing_id), on_event)

    async def subscribe_to_presence(self, logical_key: str, on_event: EventHandler) -> Subscription:
        """Deliver every user_presence event."""
        return await self.subscribe(logical_key, PRESENCE_CHANNEL, on_event)

    @governed("unsubscribe")
    async def unsubscribe(self, logical_key: str) -> None:
        await self.registry.unsubscribe(logical_key)

    async def cleanup(self) -> None:
        """Release every subscription. Never raises."""
        await self.registry.shutdown()


def get_realtime(request: Request) -> RealtimeService:
    """FastAPI dependency — the RealtimeService built in the lifespan."""
    service = getattr(request.app.state, "realtime", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Real-time service unavailable")
    return service
