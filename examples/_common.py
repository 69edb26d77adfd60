"""
Shared helpers for MarketWire examples.

Checks the backend is up and hands back clients that act as a given
user (the gateway would normally set X-User-ID after login).
"""

import sys

import httpx

BASE = "http://localhost:8000/api/v1"


def check_backend() -> None:
    """Verify the backend is reachable and Redis is connected."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  marketwire serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Redis: {'✓' if health['redis'] == 'ok' else '✗ ' + health['redis']}")

    if health["redis"] != "ok":
        print("\nERROR: Redis is not connected. Start it with: docker run -p 6379:6379 redis:7")
        sys.exit(1)


def client_for(user_id: str | None = None) -> httpx.Client:
    """An httpx Client that acts as user_id (anonymous if None)."""
    headers = {"X-User-ID": user_id} if user_id else {}
    return httpx.Client(base_url=BASE, timeout=10, headers=headers)
