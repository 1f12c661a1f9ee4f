"""Pydantic models for the flowr player API."""

from backend.models.player import PlayRequest, SeekRequest, VolumeRequest
from backend.models.queue import QueueItem, QueueReplaceRequest, QueueTrackRequest
from backend.models.responses import NotificationsResponse, PlaybackStateResponse, QueueResponse

__all__ = [
    "PlayRequest",
    "SeekRequest",
    "VolumeRequest",
    "QueueItem",
    "QueueReplaceRequest",
    "QueueTrackRequest",
    "NotificationsResponse",
    "PlaybackStateResponse",
    "QueueResponse",
]
