"""Stream signing gateway.

Forwards ``GET /api/stream?trackId=&listenerAddress=`` to the upstream
stream service and hands its signed URL back to the player.
"""

import requests
from config import BACKEND_URL, STREAM_TIMEOUT
from core.logging import api_logger, log_api_request, log_error
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

router = APIRouter(tags=["stream"])


@router.get("/stream")
def stream_track(
    track_id: str | None = Query(None, alias="trackId"),
    listener_address: str | None = Query(None, alias="listenerAddress"),
):
    """Return the upstream stream service's signed URL for a track."""
    if not track_id or not listener_address:
        return JSONResponse({"success": False, "error": "Missing required parameters"}, status_code=400)

    log_api_request("stream", track_id=track_id, listener_address=listener_address)
    try:
        response = requests.get(
            f"{BACKEND_URL}/stream",
            params={"trackId": track_id, "listenerAddress": listener_address},
            headers={"Content-Type": "application/json"},
            timeout=STREAM_TIMEOUT,
        )

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            message = error_data.get("message") if isinstance(error_data, dict) else None
            return JSONResponse(
                {"success": False, "error": message or "Error streaming track"},
                status_code=response.status_code,
            )

        return JSONResponse(response.json())
    except (requests.RequestException, ValueError) as e:
        log_error(api_logger, e, track_id=track_id)
        return JSONResponse({"success": False, "error": str(e) or "Unknown error occurred"}, status_code=500)
