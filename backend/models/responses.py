"""Response models for API endpoints."""

from backend.models.queue import QueueItem
from core.models import Notification, PlaybackSnapshot, Track
from pydantic import BaseModel
from utils.formatting import format_digest, format_time


class PlaybackStateResponse(BaseModel):
    """Playback state with display strings for the player bar."""

    state: str
    is_playing: bool
    queue_index: int
    queue_length: int
    current_track: Track | None
    volume: float
    current_time: float
    duration: float
    elapsed_display: str
    duration_display: str
    transaction_digest: str | None
    transaction_display: str

    @classmethod
    def from_snapshot(cls, snapshot: PlaybackSnapshot) -> "PlaybackStateResponse":
        return cls(
            state=snapshot.state,
            is_playing=snapshot.is_playing,
            queue_index=snapshot.queue_index,
            queue_length=len(snapshot.queue),
            current_track=snapshot.current_track,
            volume=snapshot.volume,
            current_time=snapshot.current_time,
            duration=snapshot.duration,
            elapsed_display=format_time(snapshot.current_time),
            duration_display=format_time(snapshot.duration),
            transaction_digest=snapshot.transaction_digest,
            transaction_display=format_digest(snapshot.transaction_digest),
        )


class QueueResponse(BaseModel):
    """Response for queue listing."""

    items: list[QueueItem]
    count: int
    current_index: int

    @classmethod
    def from_snapshot(cls, snapshot: PlaybackSnapshot) -> "QueueResponse":
        items = [
            QueueItem(position=i, is_current=i == snapshot.queue_index, track=track)
            for i, track in enumerate(snapshot.queue)
        ]
        return cls(items=items, count=len(items), current_index=snapshot.queue_index)


class NotificationsResponse(BaseModel):
    """Recent notifications, oldest first."""

    notifications: list[Notification]
