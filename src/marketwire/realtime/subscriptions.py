"""Subscription registry — logical key → open pub/sub subscription.

Learn: Consumers address subscriptions by a logical key (user:{id},
chat:{id}, or a per-WebSocket key) rather than by channel name, so the
same consumer can be torn down without knowing which channel it used.

The registry is constructed at application startup and shut down at
stop; nothing here is a module-level singleton. An asyncio.Lock keeps
subscribe/unsubscribe/shutdown from interleaving on the map.

Re-subscribing under an active key closes the old handle before the new
one is stored (close-then-replace). At most one handle per key.

Lifecycle per key:  unsubscribed → subscribed → unsubscribed
"""

import asyncio
from typing import Optional

import structlog

from marketwire.realtime.pubsub import ChannelStore, EventHandler, Subscription

logger = structlog.get_logger()


class SubscriptionRegistry:
    """Owns every subscription handle opened on behalf of a consumer."""

    def __init__(self, store: ChannelStore):
        self.store = store
        self._handles: dict[str, Subscription] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, logical_key: str) -> bool:
        return logical_key in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def active_keys(self) -> list[str]:
        return sorted(self._handles)

    def get(self, logical_key: str) -> Optional[Subscription]:
        return self._handles.get(logical_key)

    async def subscribe(
        self,
        logical_key: str,
        channel: str,
        on_event: EventHandler,
    ) -> Subscription:
        """Open a subscription on channel and register it under logical_key.

        Raises MessagingStoreError if the subscription cannot be opened;
        in that case any previous handle for the key is already closed
        and the key is left unsubscribed.
        """
        async with self._lock:
            previous = self._handles.pop(logical_key, None)
            if previous is not None:
                try:
                    await self.store.close_subscription(previous)
                except Exception as e:
                    logger.warning(
                        "registry.replace_close_failed",
                        logical_key=logical_key,
                        channel=previous.channel,
                        error=str(e),
                    )

            handle = await self.store.subscribe(channel, on_event)
            self._handles[logical_key] = handle

        logger.debug("registry.subscribed", logical_key=logical_key, channel=channel)
        return handle

    async def unsubscribe(self, logical_key: str) -> None:
        """Close and forget the handle for logical_key. No-op if absent."""
        async with self._lock:
            handle = self._handles.pop(logical_key, None)
            if handle is None:
                return
            await self.store.close_subscription(handle)

        logger.debug("registry.unsubscribed", logical_key=logical_key)

    async def shutdown(self) -> None:
        """Close every outstanding handle. Never raises; safe to call twice."""
        async with self._lock:
            handles = list(self._handles.items())
            self._handles.clear()

            for logical_key, handle in handles:
                try:
                    await handle.close()
                except Exception as e:
                    logger.warning(
                        "registry.close_failed",
                        logical_key=logical_key,
                        channel=handle.channel,
                        error=str(e),
                    )

        if handles:
            logger.info("registry.shutdown", closed=len(handles))
