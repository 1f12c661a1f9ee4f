"""Player control routes for the flowr player API."""

from backend.models.player import PlayRequest, SeekRequest, VolumeRequest
from backend.models.responses import PlaybackStateResponse
from backend.services.player import get_session
from core.logging import log_api_request
from core.session import PlaybackSession
from fastapi import APIRouter, Depends

router = APIRouter(prefix="/player", tags=["player"])


def _state(session: PlaybackSession) -> PlaybackStateResponse:
    return PlaybackStateResponse.from_snapshot(session.snapshot())


@router.get("/state", response_model=PlaybackStateResponse)
async def get_playback_state(session: PlaybackSession = Depends(get_session)):
    """Get current playback state."""
    return _state(session)


@router.post("/play", response_model=PlaybackStateResponse)
async def play(request: PlayRequest | None = None, session: PlaybackSession = Depends(get_session)):
    """Play the given track, or resume the current one."""
    if request is not None and request.track is not None:
        log_api_request("play_track", track_id=request.track.id)
        session.play_track(request.track)
    else:
        log_api_request("play")
        session.play()
    return _state(session)


@router.post("/pause", response_model=PlaybackStateResponse)
async def pause(session: PlaybackSession = Depends(get_session)):
    """Pause playback."""
    log_api_request("pause")
    session.pause()
    return _state(session)


@router.post("/toggle", response_model=PlaybackStateResponse)
async def toggle_play_pause(session: PlaybackSession = Depends(get_session)):
    """Toggle between playing and paused."""
    log_api_request("toggle_play_pause")
    session.toggle_play_pause()
    return _state(session)


@router.post("/next", response_model=PlaybackStateResponse)
async def next_track(session: PlaybackSession = Depends(get_session)):
    """Skip to next track (loops to the first after the last)."""
    log_api_request("next")
    session.next()
    return _state(session)


@router.post("/previous", response_model=PlaybackStateResponse)
async def previous_track(session: PlaybackSession = Depends(get_session)):
    """Restart the current track or go to the previous one."""
    log_api_request("previous")
    session.previous()
    return _state(session)


@router.put("/volume", response_model=PlaybackStateResponse)
async def set_volume(request: VolumeRequest, session: PlaybackSession = Depends(get_session)):
    """Set volume (clamped to 0-1)."""
    log_api_request("set_volume", level=request.level)
    session.set_volume(request.level)
    return _state(session)


@router.put("/seek", response_model=PlaybackStateResponse)
async def seek(request: SeekRequest, session: PlaybackSession = Depends(get_session)):
    """Seek within the current track."""
    log_api_request("seek", time=request.time)
    session.seek(request.time)
    return _state(session)
