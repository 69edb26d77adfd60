"""Pydantic schemas for chat messages.

Learn: A ChatMessage is immutable once appended to the conversation log.
ConversationMeta is a derived summary overwritten on every send; it can lag
the log if the meta write fails, and is never the source of truth.
"""

from typing import Optional

from pydantic import BaseModel, Field

from marketwire.schemas.common import WireModel, new_event_id, utc_now_iso


# ─── Create (client → platform) ─────────────────────────


class MessageContent(BaseModel):
    """What a sender supplies for a new message."""
    content: str = Field(..., min_length=1, description="Message text")
    type: Optional[str] = Field(None, description="Message type (default: text)")


# ─── Read (platform → client) ───────────────────────────


class ChatMessage(WireModel):
    id: str = Field(default_factory=new_event_id)
    chat_id: str
    sender_id: str
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)
    type: str = "text"


class ConversationMeta(WireModel):
    last_message: str
    last_message_time: str
    last_sender_id: str
