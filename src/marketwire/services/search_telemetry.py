"""Search telemetry — global bounded query log plus popularity ranking.

Learn: Every submitted search is pushed onto search:analytics (capped at
1000 entries) and bumped in the search:suggestions sorted set, which the
Channel Store keeps trimmed to its top members. Popular searches and
prefix suggestions both read from that sorted set.
"""

from typing import Optional

import structlog

from marketwire.config import settings
from marketwire.realtime.keys import SEARCH_LOG_KEY
from marketwire.realtime.pubsub import ChannelStore
from marketwire.schemas.activity import SearchEvent
from marketwire.services.policy import BestEffort, governed

logger = structlog.get_logger()


class SearchTelemetry:

    def __init__(self, store: ChannelStore, capacity: int | None = None):
        self.store = store
        self.capacity = capacity or settings.search_log_capacity

    @governed("track_search")
    async def track_search(self, query: str, user_id: Optional[str] = None) -> BestEffort:
        query = (query or "").strip()
        if not query:
            return

        event = SearchEvent(query=query, user_id=user_id)
        await self.store.append(SEARCH_LOG_KEY, event.to_wire())
        await self.store.trim(SEARCH_LOG_KEY, 0, self.capacity - 1)
        await self.store.record_for_suggestions(query)

    @governed("get_popular_searches", default=list)
    async def get_popular_searches(self, limit: int = 10) -> list[str]:
        return await self.store.suggestions("", limit)

    @governed("get_search_suggestions", default=list)
    async def get_search_suggestions(self, prefix: str, limit: int = 10) -> list[str]:
        return await self.store.suggestions(prefix, limit)

    @governed("recent_searches", default=list)
    async def recent_searches(self, limit: int = 20) -> list[SearchEvent]:
        window = min(limit, self.capacity)
        if window <= 0:
            return []
        raw = await self.store.range(SEARCH_LOG_KEY, 0, window - 1)
        return [SearchEvent.model_validate(item) for item in raw]
