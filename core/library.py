"""Library actions for liked tracks functionality."""

import requests
from core.logging import log_error, log_player_action, player_logger
from core.models import ActionResult, Track
from core.notifications import NotificationCenter
from eliot import start_action


class LibraryActions:
    """Client for the like/unlike actions of the catalogue service.

    ``POST <endpoint>/<track_id>`` adds a track to the listener's library,
    ``DELETE`` removes it. Both answer ``{success, message?, error?}``.
    """

    def __init__(self, endpoint: str, notifications: NotificationCenter, timeout: float | None = 10.0,
                 session: requests.Session | None = None):
        self.endpoint = endpoint.rstrip('/')
        self.notifications = notifications
        self.timeout = timeout
        self.http = session or requests.Session()

    def add_user_track(self, track_id: str) -> ActionResult:
        return self._call("POST", track_id)

    def remove_user_track(self, track_id: str) -> ActionResult:
        return self._call("DELETE", track_id)

    def toggle_like(self, track: Track) -> bool:
        """Flip ``track.liked`` optimistically and confirm with the service.

        The flip is reverted when the action fails.

        Args:
            track: Track to like or unlike; its ``liked`` flag is updated in place

        Returns:
            bool: The track's liked state after the call
        """
        was_liked = track.liked
        track.liked = not was_liked

        with start_action(player_logger, "toggle_like", track_id=track.id):
            if was_liked:
                result = self.remove_user_track(track.id)
                fallback_ok, fallback_error = "Track removed from your library", "Failed to remove track from your library"
            else:
                result = self.add_user_track(track.id)
                fallback_ok, fallback_error = "Track added to your library", "Failed to add track to your library"

            if not result.success:
                track.liked = was_liked
                self.notifications.error(result.error or fallback_error, track_id=track.id)
            else:
                self.notifications.success(result.message or fallback_ok, track_id=track.id)

            log_player_action(
                "like_button_pressed",
                trigger_source="user",
                track=track.display_name,
                old_state="liked" if was_liked else "not_liked",
                new_state="liked" if track.liked else "not_liked",
            )
        return track.liked

    def _call(self, method: str, track_id: str) -> ActionResult:
        try:
            response = self.http.request(method, f"{self.endpoint}/{track_id}", timeout=self.timeout)
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            log_error(player_logger, e, track_id=track_id, method=method)
            return ActionResult(success=False, error="An error occurred while updating your library")

        if not isinstance(payload, dict):
            return ActionResult(success=False, error="Unexpected response from library service")
        return ActionResult(
            success=bool(payload.get("success")) and response.ok,
            message=payload.get("message"),
            error=payload.get("error"),
        )
