"""Queue routes for the flowr player API."""

from backend.models.queue import QueueReplaceRequest, QueueTrackRequest
from backend.models.responses import QueueResponse
from backend.services.player import get_session
from core.logging import log_api_request
from core.session import PlaybackSession
from fastapi import APIRouter, Depends, HTTPException

router = APIRouter(prefix="/queue", tags=["queue"])


def _queue(session: PlaybackSession) -> QueueResponse:
    return QueueResponse.from_snapshot(session.snapshot())


@router.get("", response_model=QueueResponse)
async def get_queue(session: PlaybackSession = Depends(get_session)):
    """Get the current playback queue."""
    return _queue(session)


@router.put("", response_model=QueueResponse)
async def replace_queue(request: QueueReplaceRequest, session: PlaybackSession = Depends(get_session)):
    """Replace the queue and start playing at ``start_index``."""
    log_api_request("replace_queue", count=len(request.tracks), start_index=request.start_index)
    session.replace_queue_and_play(request.tracks, request.start_index)
    return _queue(session)


@router.post("/add", status_code=201, response_model=QueueResponse)
async def add_to_queue(request: QueueTrackRequest, session: PlaybackSession = Depends(get_session)):
    """Append a track to the queue."""
    log_api_request("add_to_queue", track_id=request.track.id)
    session.add_to_queue(request.track)
    return _queue(session)


@router.post("/play-next", status_code=201, response_model=QueueResponse)
async def play_next(request: QueueTrackRequest, session: PlaybackSession = Depends(get_session)):
    """Insert a track right after the current one."""
    log_api_request("play_next", track_id=request.track.id)
    session.play_next(request.track)
    return _queue(session)


@router.delete("/tracks/{track_id}", response_model=QueueResponse)
async def remove_track(track_id: str, session: PlaybackSession = Depends(get_session)):
    """Remove every queued entry of a track."""
    log_api_request("remove_track", track_id=track_id)
    if not session.remove_from_queue(track_id):
        raise HTTPException(status_code=404, detail=f"Track {track_id} is not queued")
    return _queue(session)


@router.post("/clear", status_code=204)
async def clear_queue(session: PlaybackSession = Depends(get_session)):
    """Clear the entire queue."""
    log_api_request("clear_queue")
    session.clear_queue()


@router.delete("/{position}", response_model=QueueResponse)
async def remove_from_queue(position: int, session: PlaybackSession = Depends(get_session)):
    """Remove a track from the queue by position."""
    log_api_request("remove_at", position=position)
    if not session.remove_at(position):
        raise HTTPException(status_code=404, detail=f"No track at position {position}")
    return _queue(session)
