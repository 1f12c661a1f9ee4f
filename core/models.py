"""Data models shared by the playback core and the HTTP surface."""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, computed_field
from typing import Literal

NO_TRACK = -1


class Track(BaseModel):
    """A playable track as supplied by the catalogue.

    ``duration`` is only a display hint; the output device reports the
    authoritative value once metadata loads. ``liked`` is owned by the
    library feature and may change between reads.
    """

    id: str = Field(min_length=1)
    title: str = ""
    artist_name: str | None = None
    artist_id: str | None = None
    cover_url: str | None = None
    duration: float | None = None
    audio_url: str | None = None
    liked: bool = False
    stream_count: int = 0

    @property
    def display_name(self) -> str:
        artist = self.artist_name or "Unknown Artist"
        title = self.title or self.id
        return f"{artist} - {title}"


class ResolvedStream(BaseModel):
    """A playable locator for one track."""

    track_id: str
    url: str
    signed: bool = False
    transaction_digest: str | None = None


class Notification(BaseModel):
    """A user-visible message (the toast of the web client)."""

    level: Literal["info", "success", "error"]
    message: str
    track_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ActionResult(BaseModel):
    """Result of a library like/unlike action."""

    success: bool
    message: str | None = None
    error: str | None = None


class PlaybackSnapshot(BaseModel):
    """Point-in-time copy of the playback session state."""

    queue: list[Track]
    queue_index: int = NO_TRACK
    current_track: Track | None = None
    is_playing: bool = False
    volume: float = 0.7
    current_time: float = 0.0
    duration: float = 0.0
    transaction_digest: str | None = None

    @computed_field
    @property
    def state(self) -> str:
        """State machine name: empty, paused or playing."""
        if self.current_track is None:
            return "empty"
        return "playing" if self.is_playing else "paused"
