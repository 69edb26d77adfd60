"""Notifications API — inbox reads, producer sends, mark-as-read.

Learn: Sending is open to internal producers (payments, listing
moderation, chat) that notify a given user; reading and marking are
scoped to the current user.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from marketwire.auth.dependencies import CurrentIdentity, get_current_user
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.notification import Notification, NotificationSpec, UnreadCount
from marketwire.services.realtime_service import RealtimeService, get_realtime

router = APIRouter()


@router.post("/users/{user_id}/notifications", response_model=Notification, status_code=201)
async def send_notification(
    user_id: str,
    body: NotificationSpec,
    svc: RealtimeService = Depends(get_realtime),
):
    """Append a notification to a user's inbox and push it live."""
    try:
        return await svc.notifications.send_notification(user_id, body)
    except MessagingStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/notifications", response_model=list[Notification])
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RealtimeService = Depends(get_realtime),
):
    """The current user's notifications, newest first."""
    return await svc.notifications.get_user_notifications(identity.user_id, limit)


@router.get("/notifications/unread-count", response_model=UnreadCount)
async def unread_count(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RealtimeService = Depends(get_realtime),
):
    return UnreadCount(unread=await svc.notifications.unread_count(identity.user_id))


@router.post("/notifications/{notification_id}/read", status_code=202)
async def mark_notification_as_read(
    notification_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RealtimeService = Depends(get_realtime),
):
    """Mark one notification as read. Accepted even if the id is unknown."""
    await svc.notifications.mark_notification_as_read(identity.user_id, notification_id)
    return {"message": "Notification marked as read"}
