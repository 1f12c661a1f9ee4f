"""Playback session wiring for the flowr player backend."""

from config import (
    DEFAULT_VOLUME,
    LIBRARY_ENDPOINT,
    LISTENER_ADDRESS,
    NOTIFICATION_HISTORY,
    STATS_ENDPOINT,
    STREAM_ENDPOINT,
    STREAM_TIMEOUT,
)
from core.device import OutputDevice
from core.library import LibraryActions
from core.notifications import NotificationCenter
from core.resolver import StreamResolver, StreamStatsReporter
from core.session import PlaybackSession
from fastapi import HTTPException, Request


def build_session(device: OutputDevice | None = None, notifications: NotificationCenter | None = None) -> PlaybackSession:
    """Construct the application's playback session from configuration.

    Args:
        device: Output device to drive; defaults to a VLC device
        notifications: Notification center; a new one is created if omitted

    Returns:
        The session, ready to use
    """
    if device is None:
        from core.vlc_device import VlcOutputDevice

        device = VlcOutputDevice()

    notifications = notifications or NotificationCenter(history_size=NOTIFICATION_HISTORY)
    reporter = StreamStatsReporter(STATS_ENDPOINT, timeout=STREAM_TIMEOUT) if STATS_ENDPOINT else None

    return PlaybackSession(
        device=device,
        resolver=StreamResolver(STREAM_ENDPOINT, timeout=STREAM_TIMEOUT),
        notifications=notifications,
        listener_address=LISTENER_ADDRESS,
        stream_reporter=reporter,
        volume=DEFAULT_VOLUME,
    )


def build_library(notifications: NotificationCenter) -> LibraryActions | None:
    """Library like/unlike client, or None when no endpoint is configured."""
    if not LIBRARY_ENDPOINT:
        return None
    return LibraryActions(LIBRARY_ENDPOINT, notifications, timeout=STREAM_TIMEOUT)


def get_session(request: Request) -> PlaybackSession:
    """Get the application's playback session."""
    return request.app.state.session


def get_library(request: Request) -> LibraryActions:
    """Get the library actions client, 503 if not configured."""
    library = getattr(request.app.state, "library", None)
    if library is None:
        raise HTTPException(status_code=503, detail="Library service not configured")
    return library
