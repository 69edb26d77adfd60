"""Notification center tests.

Learn: Notifications are the one log read newest-first; mark-as-read is
best-effort and must be safe to repeat.
"""

import asyncio

import pytest

from conftest import next_event
from marketwire.realtime.keys import notifications_key
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.notification import NotificationSpec
from marketwire.services.notification_service import NotificationCenter
from marketwire.services.policy import BestEffort


@pytest.mark.asyncio
async def test_defaults_are_filled_in(store):
    center = NotificationCenter(store)
    n = await center.send_notification("u1", NotificationSpec(title="Welcome"))

    assert n.user_id == "u1"
    assert n.type == "info"
    assert n.data == {}
    assert n.read is False


@pytest.mark.asyncio
async def test_notifications_come_back_newest_first(store):
    center = NotificationCenter(store)
    for title in ("A", "B", "C"):
        await center.send_notification("u1", NotificationSpec(title=title, message="..."))

    inbox = await center.get_user_notifications("u1", 20)
    assert [n.title for n in inbox] == ["C", "B", "A"]


@pytest.mark.asyncio
async def test_inbox_is_bounded(store):
    center = NotificationCenter(store)
    for i in range(103):
        await center.send_notification("u1", NotificationSpec(title=f"n{i}"))

    assert await store.length(notifications_key("u1")) == 100
    inbox = await center.get_user_notifications("u1", 100)
    assert inbox[0].title == "n102"
    assert inbox[-1].title == "n3"


@pytest.mark.asyncio
async def test_mark_as_read_is_idempotent(store):
    center = NotificationCenter(store)
    first = await center.send_notification("u1", NotificationSpec(title="first"))
    await center.send_notification("u1", NotificationSpec(title="second"))

    assert await center.mark_notification_as_read("u1", first.id) == BestEffort.done()
    assert await center.mark_notification_as_read("u1", first.id) == BestEffort.done()

    inbox = await center.get_user_notifications("u1")
    by_title = {n.title: n for n in inbox}
    assert by_title["first"].read is True
    assert by_title["second"].read is False
    assert [n.title for n in inbox] == ["second", "first"]


@pytest.mark.asyncio
async def test_mark_unknown_id_is_a_noop(store):
    center = NotificationCenter(store)
    await center.send_notification("u1", NotificationSpec(title="only"))

    outcome = await center.mark_notification_as_read("u1", "does-not-exist")
    assert outcome.ok

    inbox = await center.get_user_notifications("u1")
    assert inbox[0].read is False


@pytest.mark.asyncio
async def test_unread_count(store):
    center = NotificationCenter(store)
    a = await center.send_notification("u1", NotificationSpec(title="a"))
    await center.send_notification("u1", NotificationSpec(title="b"))
    await center.mark_notification_as_read("u1", a.id)

    assert await center.unread_count("u1") == 1
    assert await center.unread_count("u2") == 0


@pytest.mark.asyncio
async def test_notification_is_pushed_on_user_channel(store):
    center = NotificationCenter(store)
    received: asyncio.Queue = asyncio.Queue()
    sub = await store.subscribe("notifications:u1", received.put_nowait)
    try:
        n = await center.send_notification(
            "u1", NotificationSpec(title="Payment received", type="payment", data={"amount": 499})
        )
        event = await next_event(received)
    finally:
        await sub.close()

    assert event["type"] == "new_notification"
    assert event["data"]["id"] == n.id
    assert event["data"]["userId"] == "u1"
    assert event["data"]["data"] == {"amount": 499}


@pytest.mark.asyncio
async def test_inbox_read_degrades_to_empty(broken_store):
    center = NotificationCenter(broken_store)
    assert await center.get_user_notifications("u1") == []
    assert await center.unread_count("u1") == 0


@pytest.mark.asyncio
async def test_mark_as_read_swallows_store_errors(broken_store):
    center = NotificationCenter(broken_store)
    outcome = await center.mark_notification_as_read("u1", "n1")
    assert outcome.ok is False
    assert "redis down" in outcome.error


@pytest.mark.asyncio
async def test_send_failure_propagates(broken_store):
    center = NotificationCenter(broken_store)
    with pytest.raises(MessagingStoreError):
        await center.send_notification("u1", NotificationSpec(title="x"))
