#!/usr/bin/env python3
"""
MarketWire Quickstart — a buyer and a seller talk about a listing.

Buyer views the listing → searches → goes online → chats with the seller
→ seller is notified → seller reads the inbox and marks it read.
Run with: python examples/chat_quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import uuid

from _common import check_backend, client_for


def main():
    run_id = uuid.uuid4().hex[:6]
    buyer_id, seller_id = f"buyer-{run_id}", f"seller-{run_id}"
    listing_id, chat_id = f"listing-{run_id}", f"chat-{run_id}"

    check_backend()
    buyer = client_for(buyer_id)
    seller = client_for(seller_id)
    anon = client_for()

    # ── Listing view + search ─────────────────────────────────────
    print("\n1. Buyer searches and opens the listing...")
    anon.post("/search/track", json={"query": "royal enfield classic 350"})
    resp = buyer.post(f"/listings/{listing_id}/view")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Views: {resp.json()['views']}")

    # ── Presence ──────────────────────────────────────────────────
    print("\n2. Buyer goes online...")
    resp = buyer.post("/presence", json={"status": "online"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   {buyer_id}: {anon.get(f'/presence/{buyer_id}').json()['status']}")
    print(f"   {seller_id}: {anon.get(f'/presence/{seller_id}').json()['status']}")

    # ── Chat ──────────────────────────────────────────────────────
    print("\n3. Chatting...")
    for who, text in [
        (buyer, "Hi, is this still available?"),
        (seller, "Yes, it is."),
        (buyer, "Would you take 1.2L?"),
    ]:
        resp = who.post(f"/chats/{chat_id}/messages", json={"content": text})
        assert resp.status_code == 201, f"Failed: {resp.text}"

    for msg in buyer.get(f"/chats/{chat_id}/messages").json():
        print(f"   [{msg['timestamp']}] {msg['senderId']}: {msg['message']}")
    meta = buyer.get(f"/chats/{chat_id}/meta").json()
    print(f"   Last message: {meta['lastMessage']!r} from {meta['lastSenderId']}")

    # ── Notification ──────────────────────────────────────────────
    print("\n4. Notifying the seller...")
    resp = anon.post(f"/users/{seller_id}/notifications", json={
        "title": "New offer on your listing",
        "message": "A buyer offered 1.2L",
        "type": "message",
        "data": {"chatId": chat_id, "listingId": listing_id},
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    notification = resp.json()

    print(f"   Unread: {seller.get('/notifications/unread-count').json()['unread']}")
    seller.post(f"/notifications/{notification['id']}/read")
    print(f"   Unread after marking: {seller.get('/notifications/unread-count').json()['unread']}")

    # ── Popular searches ──────────────────────────────────────────
    print("\n5. Popular searches:")
    for rank, query in enumerate(anon.get("/search/popular").json(), start=1):
        print(f"   {rank}. {query}")

    print("\nDone.")


if __name__ == "__main__":
    main()
