"""Pydantic schemas for user presence."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, model_serializer

from marketwire.schemas.common import WireModel

PresenceStatus = Literal["online", "offline"]


class PresenceUpdate(BaseModel):
    status: PresenceStatus = "online"


class PresenceRecord(WireModel):
    """Stored presence. An absent record reads back as {status: offline, lastSeen: null}."""
    status: PresenceStatus
    last_seen: Optional[str] = None
    timestamp: Optional[int] = None

    @model_serializer(mode="wrap")
    def _omit_missing_timestamp(self, handler) -> dict[str, Any]:
        data = handler(self)
        if self.timestamp is None:
            data.pop("timestamp", None)
        return data

    @classmethod
    def offline(cls) -> "PresenceRecord":
        return cls(status="offline", last_seen=None)
