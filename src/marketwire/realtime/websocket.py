"""WebSocket endpoint — live chat, notifications and presence for one user.

Learn: Each client connects to /ws/users/{user_id} (the gateway has already
authenticated the upgrade). The handler:
1. Marks the user online and subscribes the connection to the user's
   notification channel
2. Reads client frames: ping, heartbeat, join_chat, leave_chat,
   send_message, typing_start, typing_stop, get_messages
3. Forwards every event published on a subscribed channel to the client,
   except the user's own typing indicators
4. On disconnect, releases the connection's subscriptions and marks the
   user offline

Every subscription is registered under a per-connection logical key
(ws:{conn}:user, ws:{conn}:chat:{id}) so two tabs of the same user never
replace each other's handles.
"""

import json
import uuid

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from marketwire.events.types import USER_TYPING
from marketwire.realtime.keys import chat_channel, notifications_channel
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.chat import MessageContent

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws/users/{user_id}")
async def user_websocket(websocket: WebSocket, user_id: str):
    """Bidirectional real-time connection for one user."""
    svc = getattr(websocket.app.state, "realtime", None)
    if svc is None:
        await websocket.close(code=1011, reason="Real-time service unavailable")
        return

    await websocket.accept()

    conn_id = uuid.uuid4().hex[:12]
    log = logger.bind(user_id=user_id, conn_id=conn_id)
    owned_keys: set[str] = set()

    async def forward(payload: dict) -> None:
        if payload.get("type") == USER_TYPING and payload.get("data", {}).get("userId") == user_id:
            return
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.send_text(json.dumps(payload))

    async def send(frame: dict) -> None:
        await websocket.send_text(json.dumps(frame))

    async def join(logical_key: str, channel: str) -> None:
        await svc.subscribe(logical_key, channel, forward)
        owned_keys.add(logical_key)

    async def leave(logical_key: str) -> None:
        owned_keys.discard(logical_key)
        await svc.unsubscribe(logical_key)

    try:
        try:
            await join(f"ws:{conn_id}:user", notifications_channel(user_id))
            await svc.presence.set_presence(user_id, "online")
        except MessagingStoreError as e:
            log.warning("ws.setup_failed", error=str(e))
            await websocket.close(code=1011, reason="Real-time backend unavailable")
            return

        log.info("ws.connected")

        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                await send({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await send({"type": "error", "message": "Frame must be a JSON object"})
                continue

            kind = msg.get("type")
            chat_id = msg.get("chatId")
            if not isinstance(chat_id, str):
                chat_id = None

            try:
                if kind == "ping":
                    await send({"type": "pong"})

                elif kind == "heartbeat":
                    await svc.presence.set_presence(user_id, "online")

                elif kind == "join_chat":
                    if not chat_id:
                        await send({"type": "error", "message": "chatId is required"})
                        continue
                    await join(f"ws:{conn_id}:chat:{chat_id}", chat_channel(chat_id))
                    await send({"type": "joined_chat", "chatId": chat_id})

                elif kind == "leave_chat":
                    if chat_id:
                        await leave(f"ws:{conn_id}:chat:{chat_id}")
                        await send({"type": "left_chat", "chatId": chat_id})

                elif kind == "send_message":
                    content = msg.get("content")
                    if not chat_id or not isinstance(content, str) or not content.strip():
                        await send({"type": "error", "message": "Chat ID and message content are required"})
                        continue
                    await svc.messages.send_message(
                        chat_id,
                        MessageContent(content=content.strip(), type=msg.get("messageType")),
                        user_id,
                    )

                elif kind in ("typing_start", "typing_stop"):
                    if chat_id:
                        await svc.messages.set_typing(chat_id, user_id, kind == "typing_start")

                elif kind == "get_messages":
                    if not chat_id:
                        await send({"type": "error", "message": "chatId is required"})
                        continue
                    limit = msg.get("limit", 50)
                    if not isinstance(limit, int) or isinstance(limit, bool) or not 1 <= limit <= 100:
                        await send({"type": "error", "message": "limit must be an integer from 1 to 100"})
                        continue
                    history = await svc.messages.get_messages(chat_id, limit)
                    await send({
                        "type": "messages_loaded",
                        "chatId": chat_id,
                        "messages": [m.to_wire() for m in history],
                    })

                else:
                    await send({"type": "error", "message": f"Unknown frame type: {kind}"})

            except MessagingStoreError as e:
                log.warning("ws.frame_failed", frame=kind, error=str(e))
                await send({"type": "error", "message": f"Failed to handle {kind}"})
            except ValueError as e:
                # pydantic's ValidationError is a ValueError
                log.info("ws.frame_rejected", frame=kind, error=str(e))
                await send({"type": "error", "message": f"Invalid {kind} frame"})

    except WebSocketDisconnect:
        pass
    finally:
        for key in list(owned_keys):
            try:
                await svc.unsubscribe(key)
            except MessagingStoreError as e:
                log.warning("ws.unsubscribe_failed", logical_key=key, error=str(e))
        try:
            await svc.presence.set_presence(user_id, "offline")
        except MessagingStoreError as e:
            log.warning("ws.offline_failed", error=str(e))
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
        log.info("ws.disconnected")
