"""Chat API tests.

Learn: Walks the two-user scenario through HTTP: u1 sends "hi" to c1,
then the conversation log and the meta both reflect it.
"""

import pytest


@pytest.mark.asyncio
async def test_end_to_end_chat(client):
    r = await client.post(
        "/api/v1/chats/c1/messages",
        json={"content": "hi"},
        headers={"X-User-ID": "u1"},
    )
    assert r.status_code == 201
    sent = r.json()
    assert sent["chatId"] == "c1"
    assert sent["senderId"] == "u1"
    assert sent["message"] == "hi"
    assert sent["type"] == "text"

    r = await client.get("/api/v1/chats/c1/messages", params={"limit": 50})
    assert r.status_code == 200
    messages = r.json()
    assert len(messages) == 1
    assert messages[0]["message"] == "hi"
    assert messages[0]["senderId"] == "u1"
    assert messages[0]["id"] == sent["id"]

    r = await client.get("/api/v1/chats/c1/meta")
    assert r.status_code == 200
    meta = r.json()
    assert meta["lastMessage"] == "hi"
    assert meta["lastSenderId"] == "u1"
    assert meta["lastMessageTime"] == sent["timestamp"]


@pytest.mark.asyncio
async def test_conversation_reads_chronologically(client):
    for sender, text in [("u1", "is this available?"), ("u2", "yes"), ("u1", "great")]:
        r = await client.post(
            "/api/v1/chats/c9/messages",
            json={"content": text},
            headers={"X-User-ID": sender},
        )
        assert r.status_code == 201

    r = await client.get("/api/v1/chats/c9/messages")
    assert [m["message"] for m in r.json()] == ["is this available?", "yes", "great"]


@pytest.mark.asyncio
async def test_send_requires_identity(client):
    r = await client.post("/api/v1/chats/c1/messages", json={"content": "hi"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_empty_content_is_rejected(client):
    r = await client.post(
        "/api/v1/chats/c1/messages",
        json={"content": ""},
        headers={"X-User-ID": "u1"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_meta_for_silent_chat_is_404(client):
    r = await client.get("/api/v1/chats/quiet/meta")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_store_outage_is_503(broken_client):
    r = await broken_client.post(
        "/api/v1/chats/c1/messages",
        json={"content": "hi"},
        headers={"X-User-ID": "u1"},
    )
    assert r.status_code == 503

    r = await broken_client.get("/api/v1/chats/c1/messages")
    assert r.status_code == 503


@pytest.mark.asyncio
async def test_corrupt_log_entry_maps_to_503(client, store):
    await store.append("chat:c1:messages", {"message": "partial"})
    r = await client.get("/api/v1/chats/c1/messages")
    assert r.status_code == 503


@pytest.mark.asyncio
async def test_partial_meta_maps_to_503(client, redis):
    await redis.hset("chat:c2:meta", mapping={"lastMessage": "hi"})
    r = await client.get("/api/v1/chats/c2/meta")
    assert r.status_code == 503
