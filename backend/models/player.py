"""Player control models."""

from core.models import Track
from pydantic import BaseModel, Field


class PlayRequest(BaseModel):
    """Request to play a track, or resume when no track is given."""

    track: Track | None = None


class VolumeRequest(BaseModel):
    """Request to change the output level (clamped to 0-1)."""

    level: float = Field(description="Output level, 0.0 to 1.0")


class SeekRequest(BaseModel):
    """Request to seek within the current track (clamped to its duration)."""

    time: float = Field(description="Target position in seconds")
