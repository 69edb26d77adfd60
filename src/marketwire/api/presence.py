"""Presence API — heartbeat and status lookup."""

from fastapi import APIRouter, Depends, HTTPException

from marketwire.auth.dependencies import CurrentIdentity, get_current_user
from marketwire.realtime.pubsub import MessagingStoreError
from marketwire.schemas.presence import PresenceRecord, PresenceUpdate
from marketwire.services.realtime_service import RealtimeService, get_realtime

router = APIRouter()


@router.post("/presence", response_model=PresenceRecord)
async def set_presence(
    body: PresenceUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RealtimeService = Depends(get_realtime),
):
    """Record the current user's status. Expires unless refreshed."""
    try:
        return await svc.presence.set_presence(identity.user_id, body.status)
    except MessagingStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/presence/{user_id}", response_model=PresenceRecord)
async def get_presence(
    user_id: str,
    svc: RealtimeService = Depends(get_realtime),
):
    """A user's status. Unknown or expired users read as offline."""
    return await svc.presence.get_presence(user_id)
