"""Notification center — per-user bounded inbox with push delivery.

Learn: Each user has a Redis list notifications:{user_id}, newest first,
capped at the configured capacity. Sending pushes, trims, and publishes
new_notification on the user's private channel of the same name.

Mark-as-read reads the whole list and rewrites the first matching entry
in place with LSET. That is O(n) per call, acceptable while the inbox is
bounded at 100 entries. A concurrent send can shift indices between the
read and the LSET; the rewrite then lands on a neighbouring entry. This
is a known limit of the in-place scheme.
"""

import structlog

from marketwire.config import settings
from marketwire.events.types import NEW_NOTIFICATION
from marketwire.realtime.keys import notifications_channel, notifications_key
from marketwire.realtime.pubsub import ChannelStore
from marketwire.schemas.notification import Notification, NotificationSpec
from marketwire.services.policy import BestEffort, governed

logger = structlog.get_logger()


class NotificationCenter:
    """Manages each user's notification inbox."""

    def __init__(self, store: ChannelStore, capacity: int | None = None):
        self.store = store
        self.capacity = capacity or settings.notification_log_capacity

    # ─── Send ─────────────────────────────────────────────

    @governed("send_notification")
    async def send_notification(self, user_id: str, spec: NotificationSpec) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=spec.title,
            message=spec.message,
            type=spec.type or "info",
            data=spec.data or {},
        )
        payload = notification.to_wire()

        key = notifications_key(user_id)
        await self.store.append(key, payload)
        await self.store.trim(key, 0, self.capacity - 1)
        await self.store.publish(
            notifications_channel(user_id),
            {"type": NEW_NOTIFICATION, "data": payload},
        )

        logger.info(
            "notification.sent",
            user_id=user_id,
            notification_id=notification.id,
            type=notification.type,
        )
        return notification

    # ─── Read ─────────────────────────────────────────────

    @governed("get_user_notifications", default=list)
    async def get_user_notifications(self, user_id: str, limit: int = 20) -> list[Notification]:
        """Most recent `limit` notifications, newest first."""
        window = min(limit, self.capacity)
        if window <= 0:
            return []
        raw = await self.store.range(notifications_key(user_id), 0, window - 1)
        return [Notification.model_validate(item) for item in raw]

    @governed("unread_count", default=int)
    async def unread_count(self, user_id: str) -> int:
        raw = await self.store.range(notifications_key(user_id), 0, self.capacity - 1)
        return sum(1 for item in raw if not item.get("read"))

    # ─── Mark as read ─────────────────────────────────────

    @governed("mark_notification_as_read")
    async def mark_notification_as_read(self, user_id: str, notification_id: str) -> BestEffort:
        """Flag the first entry with this id as read. Unknown ids are ignored."""
        key = notifications_key(user_id)
        entries = await self.store.range(key, 0, -1)

        for index, entry in enumerate(entries):
            if entry.get("id") == notification_id:
                entry["read"] = True
                await self.store.set_index(key, index, entry)
                logger.debug("notification.read", user_id=user_id, notification_id=notification_id)
                break
