"""Presence tracker — time-boxed online/offline status.

Learn: Presence is a single Redis key per user written with SET EX. Clients
send a heartbeat (login, WebSocket ping) that rewrites it; if no heartbeat
arrives within the TTL the key expires and the user reads back as offline.

An explicit offline is written the same way, with the same TTL, instead of
deleting the key. After the TTL an explicit offline and an expired online
look identical: no key, offline, lastSeen=None.
"""

import structlog

from marketwire.config import settings
from marketwire.events.types import USER_PRESENCE
from marketwire.realtime.keys import PRESENCE_CHANNEL, presence_key
from marketwire.realtime.pubsub import ChannelStore
from marketwire.schemas.common import epoch_millis, utc_now_iso
from marketwire.schemas.presence import PresenceRecord, PresenceStatus
from marketwire.services.policy import governed

logger = structlog.get_logger()


class PresenceTracker:

    def __init__(self, store: ChannelStore, ttl_seconds: int | None = None):
        self.store = store
        self.ttl_seconds = ttl_seconds or settings.presence_ttl_seconds

    @governed("set_presence")
    async def set_presence(self, user_id: str, status: PresenceStatus = "online") -> PresenceRecord:
        record = PresenceRecord(status=status, last_seen=utc_now_iso(), timestamp=epoch_millis())
        data = record.to_wire()

        await self.store.set_with_expiry(presence_key(user_id), data, self.ttl_seconds)
        await self.store.publish(
            PRESENCE_CHANNEL,
            {"type": USER_PRESENCE, "userId": user_id, "data": data},
        )

        logger.debug("presence.updated", user_id=user_id, status=status)
        return record

    @governed("get_presence", default=PresenceRecord.offline)
    async def get_presence(self, user_id: str) -> PresenceRecord:
        stored = await self.store.get(presence_key(user_id))
        if not stored:
            return PresenceRecord.offline()
        return PresenceRecord.model_validate(stored)
