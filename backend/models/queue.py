"""Queue models for playback queue management."""

from core.models import Track
from pydantic import BaseModel, Field


class QueueItem(BaseModel):
    """A track in the playback queue with position."""

    position: int = Field(ge=0, description="0-indexed position in queue")
    is_current: bool = False
    track: Track


class QueueReplaceRequest(BaseModel):
    """Request to replace the queue and start playing."""

    tracks: list[Track] = Field(description="Tracks in playback order (empty clears the queue)")
    start_index: int = Field(0, description="Index to start from, clamped into range")


class QueueTrackRequest(BaseModel):
    """Request carrying a single track (add, play next)."""

    track: Track
