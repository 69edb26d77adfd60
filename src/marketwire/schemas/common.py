"""Shared pieces for the wire models.

Learn: Payloads stored in Redis and sent to clients use camelCase keys
(chatId, senderId, lastSeen) because the web and mobile clients read them
directly. Python code uses snake_case attributes; the alias generator
bridges the two. Always dump with by_alias=True before writing to Redis.
"""

import secrets
import time
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2024-05-01T10:00:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def new_event_id() -> str:
    """Millisecond timestamp plus a short random suffix.

    Sorts by creation time; the suffix keeps two ids minted in the same
    millisecond apart.
    """
    return f"{epoch_millis()}-{secrets.token_hex(3)}"


class WireModel(BaseModel):
    """Base for every document that travels through Redis or the API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
