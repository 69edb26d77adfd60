"""Channel Store — Redis lists, hashes, counters and pub/sub behind one object.

Learn: Redis pub/sub is fire-and-forget. If no one is listening, the message
is lost. That's fine for real-time UI updates (the client can always query
the API to catch up). The bounded lists next to each channel are the
catch-up window: the last 100 chat messages, the last 100 notifications.

Every primitive here maps to exactly one Redis command. Callers that need
two of them (push then trim, log then meta) issue them in sequence; there is
no MULTI/EXEC. Redis' own per-command atomicity is all we rely on.

Any RedisError or undecodable payload surfaces as MessagingStoreError so
the service layer only has one failure type to apply its policy to.
"""

import asyncio
import functools
import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Union

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from marketwire.config import settings
from marketwire.realtime.keys import SUGGESTIONS_KEY

logger = structlog.get_logger()

EventHandler = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]


class MessagingStoreError(Exception):
    """Raised when a Channel Store operation fails."""


def _store_call(fn):
    """Translate Redis and JSON failures into MessagingStoreError."""

    @functools.wraps(fn)
    async def wrapper(self, *args, **kwargs):
        try:
            return await fn(self, *args, **kwargs)
        except MessagingStoreError:
            raise
        except (RedisError, OSError, ValueError) as e:
            raise MessagingStoreError(f"{fn.__name__} failed: {e}") from e

    return wrapper


def _decode(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    return json.loads(raw)


class Subscription:
    """One open pub/sub subscription with its own reader task.

    Learn: each Subscription holds a dedicated pub/sub connection taken
    from the pool, so closing one never disturbs another. The reader polls
    with a timeout instead of blocking forever so cancellation is prompt.
    """

    def __init__(self, pubsub, channel: str, handler: EventHandler):
        self.channel = channel
        self._pubsub = pubsub
        self._handler = handler
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        try:
            await self._pubsub.subscribe(self.channel)
        except BaseException:
            await self._pubsub.aclose()
            raise
        self._task = asyncio.create_task(self._reader())

    async def _reader(self) -> None:
        while not self._closed:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=1.0
                )
            except RedisError as e:
                logger.warning("subscription.read_error", channel=self.channel, error=str(e))
                await asyncio.sleep(0.5)
                continue
            if message is None:
                # Some connections return immediately instead of waiting out the timeout
                await asyncio.sleep(0.01)
                continue
            if message.get("type") != "message":
                continue
            try:
                payload = json.loads(message["data"])
                result = self._handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # A broken consumer must not kill delivery for the channel
                logger.exception("subscription.handler_error", channel=self.channel)

    async def close(self) -> None:
        """Stop the reader and release the pub/sub connection. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        try:
            await self._pubsub.unsubscribe(self.channel)
        finally:
            await self._pubsub.aclose()


class ChannelStore:
    """Thin async wrapper around a Redis client.

    Values pushed to lists and stored with expiry are JSON documents;
    list reads decode them back to dicts.
    """

    def __init__(self, redis: aioredis.Redis, suggestion_capacity: Optional[int] = None):
        self.redis = redis
        self.suggestion_capacity = suggestion_capacity or settings.suggestion_capacity

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "ChannelStore":
        """Build a store on a pooled connection (nothing is opened until first use)."""
        client = aioredis.from_url(
            url or settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.redis_connect_timeout,
            health_check_interval=settings.redis_health_check_interval,
        )
        return cls(client)

    @_store_call
    async def ping(self) -> bool:
        return await self.redis.ping()

    async def close(self) -> None:
        await self.redis.aclose()

    # ─── Lists ───────────────────────────────────────────

    @_store_call
    async def append(self, key: str, value: dict[str, Any]) -> int:
        """Push a JSON document at the head of a list. Returns the new length."""
        return await self.redis.lpush(key, json.dumps(value))

    @_store_call
    async def trim(self, key: str, start: int, end: int) -> None:
        await self.redis.ltrim(key, start, end)

    @_store_call
    async def range(self, key: str, start: int, end: int) -> list[dict[str, Any]]:
        raw = await self.redis.lrange(key, start, end)
        return [json.loads(item) for item in raw]

    @_store_call
    async def set_index(self, key: str, index: int, value: dict[str, Any]) -> None:
        await self.redis.lset(key, index, json.dumps(value))

    @_store_call
    async def length(self, key: str) -> int:
        return await self.redis.llen(key)

    # ─── Hashes ──────────────────────────────────────────

    @_store_call
    async def set_fields(self, key: str, fields: dict[str, str]) -> None:
        await self.redis.hset(key, mapping=fields)

    @_store_call
    async def get_fields(self, key: str) -> dict[str, str]:
        return await self.redis.hgetall(key)

    # ─── Plain values & counters ─────────────────────────

    @_store_call
    async def set_with_expiry(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        await self.redis.set(key, json.dumps(value), ex=ttl_seconds)

    @_store_call
    async def get(self, key: str) -> Any:
        """Return the decoded JSON value, or None if the key is absent."""
        return _decode(await self.redis.get(key))

    @_store_call
    async def get_int(self, key: str) -> int:
        raw = await self.redis.get(key)
        return int(raw) if raw is not None else 0

    @_store_call
    async def increment(self, key: str) -> int:
        return await self.redis.incr(key)

    @_store_call
    async def expire(self, key: str, seconds: int) -> None:
        await self.redis.expire(key, seconds)

    # ─── Pub/sub ─────────────────────────────────────────

    @_store_call
    async def publish(self, channel: str, payload: dict[str, Any]) -> int:
        """Publish a JSON payload. Returns the number of receivers."""
        return await self.redis.publish(channel, json.dumps(payload))

    @_store_call
    async def subscribe(self, channel: str, handler: EventHandler) -> Subscription:
        """Open a subscription that calls handler(payload) for every message."""
        subscription = Subscription(self.redis.pubsub(), channel, handler)
        await subscription.start()
        return subscription

    @_store_call
    async def close_subscription(self, handle: Subscription) -> None:
        await handle.close()

    # ─── Search suggestions ──────────────────────────────

    @_store_call
    async def record_for_suggestions(self, query: str) -> None:
        """Bump a query's score and keep only the top-N members."""
        await self.redis.zincrby(SUGGESTIONS_KEY, 1, query.lower())
        await self.redis.zremrangebyrank(
            SUGGESTIONS_KEY, 0, -(self.suggestion_capacity + 1)
        )

    @_store_call
    async def suggestions(self, prefix: str = "", limit: int = 10) -> list[str]:
        """Most frequent queries first, filtered by lower-cased prefix."""
        prefix = prefix.lower()
        if not prefix:
            return await self.redis.zrevrange(SUGGESTIONS_KEY, 0, limit - 1)
        ranked = await self.redis.zrevrange(SUGGESTIONS_KEY, 0, -1)
        return [q for q in ranked if q.startswith(prefix)][:limit]
