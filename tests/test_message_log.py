"""Message log tests.

Learn: Covers the chat log contract:
1. Reads are chronological although storage is newest-first
2. The log never grows past its capacity
3. new_message is published on the chat channel
4. Meta tracks the last successfully appended message
5. Store failures propagate to the caller
"""

import asyncio

import pytest

from conftest import next_event
from marketwire.realtime.keys import chat_messages_key
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.chat import MessageContent
from marketwire.services.message_service import MessageLog


@pytest.mark.asyncio
async def test_send_returns_stored_message(store):
    log = MessageLog(store)
    msg = await log.send_message("c1", MessageContent(content="hi"), "u1")

    assert msg.chat_id == "c1"
    assert msg.sender_id == "u1"
    assert msg.message == "hi"
    assert msg.type == "text"
    assert msg.timestamp.endswith("Z")

    stored = await store.range(chat_messages_key("c1"), 0, 0)
    assert stored == [msg.to_wire()]


@pytest.mark.asyncio
async def test_messages_come_back_oldest_first(store):
    log = MessageLog(store)
    for text in ("A", "B", "C"):
        await log.send_message("c1", MessageContent(content=text), "u1")

    messages = await log.get_messages("c1", 50)
    assert [m.message for m in messages] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_log_keeps_only_latest_hundred(store):
    log = MessageLog(store)
    for i in range(105):
        await log.send_message("c1", MessageContent(content=f"m{i}"), "u1")

    assert await store.length(chat_messages_key("c1")) == 100

    messages = await log.get_messages("c1", 100)
    assert len(messages) == 100
    assert messages[0].message == "m5"
    assert messages[-1].message == "m104"


@pytest.mark.asyncio
async def test_read_window_is_clamped_to_capacity(store):
    log = MessageLog(store, capacity=3)
    for i in range(3):
        await log.send_message("c1", MessageContent(content=f"m{i}"), "u1")
    # An extra entry that a concurrent sender pushed but has not trimmed yet
    await store.append(chat_messages_key("c1"), {
        "id": "x", "chatId": "c1", "senderId": "u2", "message": "late",
        "timestamp": "2024-01-01T00:00:00.000Z", "type": "text",
    })

    messages = await log.get_messages("c1", 50)
    assert len(messages) == 3
    assert messages[-1].message == "late"


@pytest.mark.asyncio
async def test_empty_chat_returns_empty_list(store):
    log = MessageLog(store)
    assert await log.get_messages("nobody-here") == []
    assert await log.get_conversation_meta("nobody-here") is None


@pytest.mark.asyncio
async def test_custom_type_is_kept(store):
    log = MessageLog(store)
    msg = await log.send_message("c1", MessageContent(content="offer: 500", type="offer"), "u1")
    assert msg.type == "offer"
    assert (await log.get_messages("c1"))[0].type == "offer"


@pytest.mark.asyncio
async def test_meta_tracks_latest_message(store):
    log = MessageLog(store)
    await log.send_message("c1", MessageContent(content="hi"), "u1")
    last = await log.send_message("c1", MessageContent(content="hello back"), "u2")

    meta = await log.get_conversation_meta("c1")
    assert meta.last_message == "hello back"
    assert meta.last_sender_id == "u2"
    assert meta.last_message_time == last.timestamp


@pytest.mark.asyncio
async def test_failed_append_leaves_meta_untouched(store, monkeypatch):
    log = MessageLog(store)
    await log.send_message("c1", MessageContent(content="first"), "u1")

    async def failing_append(key, value):
        raise MessagingStoreError("append failed")

    monkeypatch.setattr(store, "append", failing_append)
    with pytest.raises(MessagingStoreError):
        await log.send_message("c1", MessageContent(content="second"), "u2")

    meta = await log.get_conversation_meta("c1")
    assert meta.last_message == "first"
    assert meta.last_sender_id == "u1"


@pytest.mark.asyncio
async def test_new_message_is_published(store):
    log = MessageLog(store)
    received: asyncio.Queue = asyncio.Queue()
    sub = await store.subscribe("chat:c1", received.put_nowait)
    try:
        msg = await log.send_message("c1", MessageContent(content="ping"), "u1")
        event = await next_event(received)
    finally:
        await sub.close()

    assert event["type"] == "new_message"
    assert event["data"]["id"] == msg.id
    assert event["data"]["chatId"] == "c1"
    assert event["data"]["message"] == "ping"


@pytest.mark.asyncio
async def test_empty_chat_id_is_rejected(store):
    log = MessageLog(store)
    with pytest.raises(ValueError):
        await log.send_message("", MessageContent(content="hi"), "u1")


@pytest.mark.asyncio
async def test_store_failure_propagates(broken_store):
    log = MessageLog(broken_store)
    with pytest.raises(MessagingStoreError):
        await log.send_message("c1", MessageContent(content="hi"), "u1")
    with pytest.raises(MessagingStoreError):
        await log.get_messages("c1")


@pytest.mark.asyncio
async def test_corrupt_entry_surfaces_as_store_error(store):
    log = MessageLog(store)
    await store.append(chat_messages_key("c1"), {"message": "partial"})
    with pytest.raises(MessagingStoreError):
        await log.get_messages("c1")


@pytest.mark.asyncio
async def test_typing_indicator_is_published_not_stored(store):
    log = MessageLog(store)
    received: asyncio.Queue = asyncio.Queue()
    sub = await store.subscribe("chat:c1", received.put_nowait)
    try:
        result = await log.set_typing("c1", "u2", True)
        event = await next_event(received)
    finally:
        await sub.close()

    assert result.ok
    assert event == {
        "type": "user_typing",
        "data": {"chatId": "c1", "userId": "u2", "isTyping": True},
    }
    assert await log.get_messages("c1") == []


@pytest.mark.asyncio
async def test_typing_indicator_is_best_effort(broken_store):
    result = await MessageLog(broken_store).set_typing("c1", "u2", False)
    assert not result.ok
    assert "redis down" in result.error
