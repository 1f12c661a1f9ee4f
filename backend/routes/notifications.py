"""Notification history routes."""

from backend.models.responses import NotificationsResponse
from backend.services.player import get_session
from core.session import PlaybackSession
from fastapi import APIRouter, Depends

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationsResponse)
async def get_notifications(session: PlaybackSession = Depends(get_session)):
    """Recent notifications, oldest first."""
    return NotificationsResponse(notifications=session.notifications.recent())
