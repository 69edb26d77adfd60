"""Chat API — send and read conversation messages.

Learn: Routes for a conversation's bounded message log:
- POST /chats/:id/messages → append + publish new_message
- GET /chats/:id/messages → recent messages, oldest first
- GET /chats/:id/meta → last message summary

Participant checks belong to the marketplace API that owns the Chat
documents; this service trusts the chat id it is given.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from marketwire.auth.dependencies import CurrentIdentity, get_current_user
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.chat import ChatMessage, ConversationMeta, MessageContent
from marketwire.services.realtime_service import RealtimeService, get_realtime

router = APIRouter()


@router.post("/chats/{chat_id}/messages", response_model=ChatMessage, status_code=201)
async def send_message(
    chat_id: str,
    body: MessageContent,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RealtimeService = Depends(get_realtime),
):
    """Send a message to a conversation as the current user."""
    try:
        return await svc.messages.send_message(chat_id, body, identity.user_id)
    except MessagingStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/chats/{chat_id}/messages", response_model=list[ChatMessage])
async def get_messages(
    chat_id: str,
    limit: int = Query(50, ge=1, le=100),
    svc: RealtimeService = Depends(get_realtime),
):
    """Recent messages for a conversation, oldest first."""
    try:
        return await svc.messages.get_messages(chat_id, limit)
    except MessagingStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/chats/{chat_id}/meta", response_model=ConversationMeta)
async def get_conversation_meta(
    chat_id: str,
    svc: RealtimeService = Depends(get_realtime),
):
    """Last message summary for a conversation."""
    try:
        meta = await svc.messages.get_conversation_meta(chat_id)
    except MessagingStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if meta is None:
        raise HTTPException(status_code=404, detail="No messages in this chat")
    return meta
