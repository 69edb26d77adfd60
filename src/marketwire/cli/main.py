"""MarketWire CLI — poke the real-time layer from a terminal.

Usage:
    marketwire health                          # Server + Redis status
    marketwire send c1 "is this still available?" --user u1
    marketwire messages c1                     # Recent chat messages, oldest first
    marketwire presence u2                     # online / offline
    marketwire notifications --user u1         # Inbox, newest first
    marketwire views 64f1c0                    # Listing view counter
    marketwire popular                         # Popular searches
    marketwire serve                           # Run the API with uvicorn
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from marketwire import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("MARKETWIRE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(user_id: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the MarketWire API."""
    headers = {"X-User-ID": user_id} if user_id else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _user_from_ctx(user_id: Optional[str]) -> str:
    """Resolve the acting user from --user or MARKETWIRE_USER_ID."""
    uid = user_id or os.environ.get("MARKETWIRE_USER_ID")
    if not uid:
        click.secho(
            "Error: --user required (or set MARKETWIRE_USER_ID env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return uid


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _status_color(status: str) -> str:
    return {"online": "green", "offline": "red", "ok": "green", "healthy": "green"}.get(
        status, "yellow"
    )


async def _get(path: str, user_id: Optional[str] = None, **params):
    async with _client(user_id) as c:
        r = await c.get(f"/api/v1{path}", params=params or None)
        r.raise_for_status()
        return r.json()


async def _post(path: str, body: dict | None = None, user_id: Optional[str] = None):
    async with _client(user_id) as c:
        r = await c.post(f"/api/v1{path}", json=body)
        r.raise_for_status()
        return r.json()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="marketwire")
def main():
    """MarketWire — real-time chat, presence and notifications."""


@main.command()
def health():
    """Show server and Redis health."""
    data = _run(_get("/health"))
    click.echo(f"Status:  {click.style(data['status'], fg=_status_color(data['status']))}")
    click.echo(f"Version: {data['version']}")
    click.echo(f"Redis:   {click.style(data['redis'], fg=_status_color(data['redis']))}")


@main.command()
@click.argument("chat_id")
@click.argument("content")
@click.option("--user", "-u", "user_id", help="Sender user id (or set MARKETWIRE_USER_ID)")
@click.option("--type", "message_type", default=None, help="Message type (default: text)")
def send(chat_id: str, content: str, user_id: Optional[str], message_type: Optional[str]):
    """Send CONTENT to chat CHAT_ID."""
    uid = _user_from_ctx(user_id)
    body = {"content": content}
    if message_type:
        body["type"] = message_type
    message = _run(_post(f"/chats/{chat_id}/messages", body, user_id=uid))
    click.secho(f"Sent {message['id']} to chat {chat_id}", fg="green")


@main.command()
@click.argument("chat_id")
@click.option("--limit", "-n", default=50, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def messages(chat_id: str, limit: int, as_json: bool):
    """Recent messages in CHAT_ID, oldest first."""
    rows = _run(_get(f"/chats/{chat_id}/messages", limit=limit))
    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No messages.")
        return
    _print_table(rows, [
        ("TIME", "timestamp", 24),
        ("SENDER", "senderId", 14),
        ("MESSAGE", "message", 50),
    ])


@main.command()
@click.argument("user_id")
def presence(user_id: str):
    """Show whether USER_ID is online."""
    record = _run(_get(f"/presence/{user_id}"))
    status = record["status"]
    seen = record.get("lastSeen") or "never"
    click.echo(f"{user_id}: {click.style(status, fg=_status_color(status))} (last seen {seen})")


@main.command()
@click.option("--user", "-u", "user_id", help="User id (or set MARKETWIRE_USER_ID)")
@click.option("--limit", "-n", default=20, show_default=True)
def notifications(user_id: Optional[str], limit: int):
    """The user's notification inbox, newest first."""
    uid = _user_from_ctx(user_id)
    rows = _run(_get("/notifications", user_id=uid, limit=limit))
    if not rows:
        click.echo("No notifications.")
        return
    for row in rows:
        row["state"] = "read" if row.get("read") else "NEW"
    _print_table(rows, [
        ("ID", "id", 22),
        ("STATE", "state", 5),
        ("TYPE", "type", 10),
        ("TITLE", "title", 40),
    ])


@main.command()
@click.argument("listing_id")
def views(listing_id: str):
    """View counter for LISTING_ID."""
    data = _run(_get(f"/listings/{listing_id}/views"))
    click.echo(f"{listing_id}: {data['views']} views")


@main.command()
@click.option("--limit", "-n", default=10, show_default=True)
def popular(limit: int):
    """Most popular search queries."""
    queries = _run(_get("/search/popular", limit=limit))
    if not queries:
        click.echo("No searches tracked yet.")
        return
    for rank, query in enumerate(queries, start=1):
        click.echo(f"{rank:>3}. {query}")


@main.command()
@click.option("--host", default=None, help="Bind address (default: MARKETWIRE_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: MARKETWIRE_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from marketwire.config import settings

    uvicorn.run(
        "marketwire.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
