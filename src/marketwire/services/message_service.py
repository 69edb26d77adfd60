"""Message log — per-conversation bounded chat history with live delivery.

Learn: Each chat keeps its most recent messages in a Redis list, newest at
index 0. A send is four sequential Redis calls:

1. LPUSH the message onto chat:{id}:messages
2. LTRIM the list back to the capacity window
3. PUBLISH new_message on chat:{id}
4. HSET chat:{id}:meta with the latest message summary

The calls are not transactional. If step 4 fails the log is still correct
and bounded, and the meta is stale until the next successful send. Two
concurrent sends may interleave their push/trim pairs; LTRIM always cuts
to the same fixed window so the bound holds either way.
"""

import structlog

from marketwire.config import settings
from marketwire.events.types import NEW_MESSAGE, USER_TYPING
from marketwire.realtime.keys import chat_channel, chat_messages_key, chat_meta_key
from marketwire.realtime.pubsub import ChannelStore
from marketwire.schemas.chat import ChatMessage, ConversationMeta, MessageContent
from marketwire.services.policy import BestEffort, governed

logger = structlog.get_logger()


class MessageLog:
    """Appends and reads chat messages for any conversation."""

    def __init__(self, store: ChannelStore, capacity: int | None = None):
        self.store = store
        self.capacity = capacity or settings.chat_log_capacity

    # ─── Send ─────────────────────────────────────────────

    @governed("send_message")
    async def send_message(
        self,
        chat_id: str,
        content: MessageContent,
        sender_id: str,
    ) -> ChatMessage:
        """Append a message, publish it, and refresh the conversation meta.

        Returns the message exactly as stored.
        """
        if not chat_id:
            raise ValueError("chat_id is required")

        message = ChatMessage(
            chat_id=chat_id,
            sender_id=sender_id,
            message=content.content,
            type=content.type or "text",
        )
        payload = message.to_wire()

        key = chat_messages_key(chat_id)
        await self.store.append(key, payload)
        await self.store.trim(key, 0, self.capacity - 1)

        await self.store.publish(chat_channel(chat_id), {"type": NEW_MESSAGE, "data": payload})

        meta = ConversationMeta(
            last_message=message.message,
            last_message_time=message.timestamp,
            last_sender_id=sender_id,
        )
        await self.store.set_fields(chat_meta_key(chat_id), meta.to_wire())

        logger.info("chat.message_sent", chat_id=chat_id, sender_id=sender_id, message_id=message.id)
        return message

    @governed("set_typing")
    async def set_typing(self, chat_id: str, user_id: str, is_typing: bool) -> BestEffort:
        """Broadcast a typing indicator to the conversation. Nothing is stored."""
        await self.store.publish(
            chat_channel(chat_id),
            {"type": USER_TYPING, "data": {"chatId": chat_id, "userId": user_id, "isTyping": is_typing}},
        )

    # ─── Read ─────────────────────────────────────────────

    @governed("get_messages")
    async def get_messages(self, chat_id: str, limit: int = 50) -> list[ChatMessage]:
        """Most recent `limit` messages, oldest first."""
        window = min(limit, self.capacity)
        if window <= 0:
            return []
        raw = await self.store.range(chat_messages_key(chat_id), 0, window - 1)
        return [ChatMessage.model_validate(item) for item in reversed(raw)]

    @governed("get_conversation_meta")
    async def get_conversation_meta(self, chat_id: str) -> ConversationMeta | None:
        fields = await self.store.get_fields(chat_meta_key(chat_id))
        if not fields:
            return None
        return ConversationMeta.model_validate(fields)
