"""Listing activity — live view counters.

Learn: A view is a single INCR on listing:{id}:views followed by a
view_update event on listing:{id}. The event carries no count; listing
pages that want the number re-read it. Counting is fire-and-forget: a
failed increment never breaks the page that triggered it.
"""

import structlog

from marketwire.events.types import VIEW_UPDATE
from marketwire.realtime.keys import listing_channel, listing_views_key
from marketwire.realtime.pubsub import ChannelStore
from marketwire.schemas.common import utc_now_iso
from marketwire.services.policy import BestEffort, governed

logger = structlog.get_logger()


class ListingActivity:

    def __init__(self, store: ChannelStore):
        self.store = store

    @governed("increment_views")
    async def increment_views(self, listing_id: str) -> BestEffort:
        await self.store.increment(listing_views_key(listing_id))
        await self.store.publish(
            listing_channel(listing_id),
            {
                "type": VIEW_UPDATE,
                "data": {"listingId": listing_id, "timestamp": utc_now_iso()},
            },
        )

    @governed("get_views", default=int)
    async def get_views(self, listing_id: str) -> int:
        return await self.store.get_int(listing_views_key(listing_id))
