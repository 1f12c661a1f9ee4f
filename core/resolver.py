"""Stream locator resolution against the signing endpoint."""

import requests
from core.logging import log_stream_resolution
from core.models import ResolvedStream, Track


class StreamResolutionError(Exception):
    """A playable locator could not be obtained for a track."""

    def __init__(self, track_id: str, reason: str):
        super().__init__(f"{track_id}: {reason}")
        self.track_id = track_id
        self.reason = reason


class StreamResolver:
    """Resolves tracks to playable URLs.

    A track that carries a direct ``audio_url`` is played from it. Every
    other track goes through the signing endpoint, and any failure there is
    final: there is no fallback to an unsigned URL.
    """

    def __init__(self, endpoint: str, timeout: float | None = 10.0, session: requests.Session | None = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.http = session or requests.Session()

    def resolve(self, track: Track, listener_address: str) -> ResolvedStream:
        """Return a playable locator for ``track``.

        Raises:
            StreamResolutionError: network failure, non-2xx status, or a body
                that is not ``{"success": true, "signedUrl": "..."}``
        """
        if track.audio_url:
            return ResolvedStream(track_id=track.id, url=track.audio_url, signed=False)

        log_stream_resolution("requested", track.id, listener_address=listener_address)
        try:
            response = self.http.get(
                self.endpoint,
                params={"trackId": track.id, "listenerAddress": listener_address},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StreamResolutionError(track.id, f"request failed: {e}") from e

        if not response.ok:
            raise StreamResolutionError(track.id, f"endpoint returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise StreamResolutionError(track.id, "response is not JSON") from e

        if not isinstance(payload, dict) or payload.get("success") is not True:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise StreamResolutionError(track.id, error or "endpoint reported failure")

        signed_url = payload.get("signedUrl")
        if not isinstance(signed_url, str) or not signed_url:
            raise StreamResolutionError(track.id, "response has no signedUrl")

        digest = payload.get("transactionDigest")
        return ResolvedStream(
            track_id=track.id,
            url=signed_url,
            signed=True,
            transaction_digest=digest if isinstance(digest, str) else None,
        )


class StreamStatsReporter:
    """Reports that a stream started, for the per-track stream counter."""

    def __init__(self, endpoint: str, timeout: float | None = 10.0, session: requests.Session | None = None):
        self.endpoint = endpoint.rstrip('/')
        self.timeout = timeout
        self.http = session or requests.Session()

    def record_stream(self, track_id: str) -> None:
        """POST ``<endpoint>/<track_id>/stream``.

        Raises:
            requests.RequestException: on transport failure or non-2xx status
        """
        response = self.http.post(f"{self.endpoint}/{track_id}/stream", timeout=self.timeout)
        response.raise_for_status()
