"""Library (likes) routes for the flowr player API."""

from backend.services.player import get_library, get_session
from core.library import LibraryActions
from core.logging import log_api_request
from core.session import PlaybackSession
from fastapi import APIRouter, Depends, HTTPException

router = APIRouter(prefix="/library", tags=["library"])


@router.post("/{track_id}/toggle-like")
async def toggle_like(
    track_id: str,
    session: PlaybackSession = Depends(get_session),
    library: LibraryActions = Depends(get_library),
):
    """Like or unlike a queued track."""
    track = next((t for t in session.queue_manager.queue_items if t.id == track_id), None)
    if track is None:
        raise HTTPException(status_code=404, detail=f"Track {track_id} is not queued")

    log_api_request("toggle_like", track_id=track_id)
    liked = library.toggle_like(track)
    return {"track_id": track_id, "liked": liked}
