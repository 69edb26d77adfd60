"""Test fixtures — an in-memory Redis per test.

Learn: fakeredis implements the Redis command set (lists, hashes, sorted
sets, expiry, pub/sub) in-process, so the managers run against the same
redis.asyncio client API they use in production. Each test gets a flushed
instance; nothing leaks between tests.

`broken_store` wraps a client on which every command fails, for checking
the propagate / degrade / best-effort policies.
"""

import asyncio

import fakeredis
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from marketwire.main import app
from marketwire.realtime.pubsub import ChannelStore
from marketwire.services.realtime_service import RealtimeService, get_realtime


class BrokenPubSub:
    def __init__(self):
        self.closed = False

    async def subscribe(self, *channels):
        raise RedisConnectionError("redis down")

    async def unsubscribe(self, *channels):
        raise RedisConnectionError("redis down")

    async def get_message(self, **kwargs):
        raise RedisConnectionError("redis down")

    async def aclose(self):
        self.closed = True


class BrokenRedis:
    """Stands in for a Redis client whose server is unreachable."""

    def pubsub(self):
        return BrokenPubSub()

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise RedisConnectionError("redis down")

        return _fail


async def next_event(queue: asyncio.Queue, timeout: float = 3.0) -> dict:
    """Wait for the next payload delivered to a subscription."""
    return await asyncio.wait_for(queue.get(), timeout=timeout)


@pytest_asyncio.fixture()
async def redis():
    r = fakeredis.FakeAsyncRedis(decode_responses=True)
    await r.flushall()
    try:
        yield r
    finally:
        await r.flushall()
        await r.aclose()


@pytest_asyncio.fixture()
async def store(redis):
    return ChannelStore(redis)


@pytest_asyncio.fixture()
async def broken_store():
    return ChannelStore(BrokenRedis())


@pytest_asyncio.fixture()
async def realtime(store):
    svc = RealtimeService(store)
    try:
        yield svc
    finally:
        await svc.cleanup()


@pytest_asyncio.fixture()
async def client(realtime, store):
    """HTTP client with the app's RealtimeService backed by fakeredis.

    Learn: ASGITransport does not run the lifespan, so the store and the
    service are attached by hand: the service through dependency_overrides,
    the store on app.state for the health check and the rate limiter.
    """
    app.dependency_overrides[get_realtime] = lambda: realtime
    app.state.channel_store = store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.channel_store = None


@pytest_asyncio.fixture()
async def broken_client(broken_store):
    """HTTP client whose RealtimeService sits on an unreachable Redis."""
    svc = RealtimeService(broken_store)
    app.dependency_overrides[get_realtime] = lambda: svc

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
