"""Unit tests for the FastAPI player, queue, library and notification routes.

The app is served by TestClient around a real PlaybackSession driving
FakeOutputDevice, with resolutions completing inline.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backend.main import create_app
from core.library import LibraryActions
from core.resolver import StreamResolutionError
from fastapi.testclient import TestClient


def track_json(track_id, **fields):
    return {"id": track_id, "title": f"Song {track_id}", "artist_name": "Test Artist", "duration": 180, **fields}


TRACKS = [track_json("t1"), track_json("t2"), track_json("t3")]


@pytest.fixture
def library():
    """Mock LibraryActions."""
    mock = Mock(spec=LibraryActions)
    mock.toggle_like.return_value = True
    return mock


@pytest.fixture
def client(session, library):
    """TestClient with the app lifespan running."""
    with TestClient(create_app(session=session, library=library)) as test_client:
        yield test_client


@pytest.fixture
def playing_client(client):
    """Client whose session is playing t1 of [t1, t2, t3]."""
    client.put("/api/queue", json={"tracks": TRACKS, "start_index": 0})
    return client


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        """Test health reports status, version and player state."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["player_state"] == "empty"
        assert "version" in data
        assert data["uptime_seconds"] >= 0


class TestPlayerRoutes:
    """Test /api/player endpoints."""

    def test_state_when_empty(self, client):
        """Test the initial playback state and display strings."""
        data = client.get("/api/player/state").json()

        assert data["state"] == "empty"
        assert data["is_playing"] is False
        assert data["queue_index"] == -1
        assert data["current_track"] is None
        assert data["elapsed_display"] == "0:00"
        assert data["transaction_display"] == "Not available"

    def test_play_track(self, client, device):
        """Test playing a track given in the body."""
        response = client.post("/api/player/play", json={"track": track_json("t7")})

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "playing"
        assert data["current_track"]["id"] == "t7"
        assert data["queue_length"] == 1
        assert data["duration_display"] == "3:00"
        assert data["transaction_digest"] == "0xt7digest"
        assert data["transaction_display"] == "0...est"
        assert device.playing is True

    def test_play_without_body_on_empty_session(self, client):
        """Test that resuming with nothing loaded stays empty."""
        response = client.post("/api/player/play")

        assert response.status_code == 200
        assert response.json()["state"] == "empty"

    def test_pause_and_resume(self, playing_client, device):
        """Test pause then play without a body."""
        assert playing_client.post("/api/player/pause").json()["state"] == "paused"
        assert device.playing is False

        assert playing_client.post("/api/player/play").json()["state"] == "playing"
        assert device.playing is True

    def test_toggle(self, playing_client):
        """Test toggle flips the playing state."""
        assert playing_client.post("/api/player/toggle").json()["is_playing"] is False
        assert playing_client.post("/api/player/toggle").json()["is_playing"] is True

    def test_next_and_previous(self, playing_client):
        """Test skipping forward and back."""
        assert playing_client.post("/api/player/next").json()["queue_index"] == 1
        assert playing_client.post("/api/player/previous").json()["queue_index"] == 0

    def test_next_wraps(self, playing_client):
        """Test next after the last track returns to the first."""
        for _ in range(2):
            playing_client.post("/api/player/next")

        assert playing_client.post("/api/player/next").json()["queue_index"] == 0

    def test_volume_is_clamped(self, client, device):
        """Test out-of-range volume is clamped, not rejected."""
        response = client.put("/api/player/volume", json={"level": 1.5})

        assert response.status_code == 200
        assert response.json()["volume"] == 1.0
        assert device.volume == 1.0

    def test_seek(self, playing_client, device):
        """Test seek within the current track."""
        response = playing_client.put("/api/player/seek", json={"time": 65})

        data = response.json()
        assert data["current_time"] == 65
        assert data["elapsed_display"] == "1:05"
        assert device.position == 65

    def test_seek_is_clamped_to_duration(self, playing_client):
        """Test a seek past the end stops at the duration."""
        response = playing_client.put("/api/player/seek", json={"time": 999})

        assert response.json()["current_time"] == 180

    def test_volume_requires_level(self, client):
        """Test request validation."""
        assert client.put("/api/player/volume", json={}).status_code == 422


class TestQueueRoutes:
    """Test /api/queue endpoints."""

    def test_replace_queue(self, client):
        """Test replacing the queue starts at the requested index."""
        response = client.put("/api/queue", json={"tracks": TRACKS, "start_index": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert data["current_index"] == 1
        assert [item["is_current"] for item in data["items"]] == [False, True, False]

    def test_replace_with_empty_list_clears(self, playing_client):
        """Test that an empty replace clears the queue."""
        data = playing_client.put("/api/queue", json={"tracks": []}).json()

        assert data["count"] == 0
        assert data["current_index"] == -1

    def test_get_queue(self, playing_client):
        """Test listing the queue."""
        data = playing_client.get("/api/queue").json()

        assert [item["track"]["id"] for item in data["items"]] == ["t1", "t2", "t3"]
        assert [item["position"] for item in data["items"]] == [0, 1, 2]

    def test_add_to_queue(self, client):
        """Test that the first add auto-starts playback."""
        response = client.post("/api/queue/add", json={"track": track_json("t1")})

        assert response.status_code == 201
        assert response.json()["current_index"] == 0
        assert client.get("/api/player/state").json()["state"] == "playing"

    def test_play_next(self, playing_client):
        """Test play-next inserts after the current track."""
        response = playing_client.post("/api/queue/play-next", json={"track": track_json("t4")})

        assert response.status_code == 201
        data = response.json()
        assert [item["track"]["id"] for item in data["items"]] == ["t1", "t4", "t2", "t3"]
        assert data["current_index"] == 0

    def test_remove_track_by_id(self, playing_client):
        """Test removing a track by id."""
        response = playing_client.delete("/api/queue/tracks/t2")

        assert response.status_code == 200
        assert [item["track"]["id"] for item in response.json()["items"]] == ["t1", "t3"]

    def test_remove_unqueued_track(self, playing_client):
        """Test removing an id that is not queued."""
        assert playing_client.delete("/api/queue/tracks/missing").status_code == 404

    def test_remove_by_position(self, playing_client):
        """Test removing the current position moves to the following track."""
        data = playing_client.delete("/api/queue/0").json()

        assert data["count"] == 2
        assert data["items"][data["current_index"]]["track"]["id"] == "t2"

    def test_remove_invalid_position(self, playing_client):
        """Test removing a position past the end."""
        assert playing_client.delete("/api/queue/10").status_code == 404

    def test_clear(self, playing_client, device):
        """Test clearing the queue."""
        response = playing_client.post("/api/queue/clear")

        assert response.status_code == 204
        assert playing_client.get("/api/queue").json()["count"] == 0
        assert device.playing is False

    def test_invalid_track_rejected(self, client):
        """Test that a track without an id is a validation error."""
        assert client.post("/api/queue/add", json={"track": {"title": "no id"}}).status_code == 422


class TestLibraryRoutes:
    """Test /api/library endpoints."""

    def test_toggle_like(self, playing_client, library):
        """Test liking a queued track."""
        response = playing_client.post("/api/library/t2/toggle-like")

        assert response.status_code == 200
        assert response.json() == {"track_id": "t2", "liked": True}
        assert library.toggle_like.call_args.args[0].id == "t2"

    def test_toggle_like_unqueued_track(self, playing_client, library):
        """Test liking a track that is not queued."""
        assert playing_client.post("/api/library/missing/toggle-like").status_code == 404
        library.toggle_like.assert_not_called()

    def test_library_not_configured(self, session, monkeypatch):
        """Test 503 when no library endpoint is configured."""
        monkeypatch.setattr("backend.services.player.LIBRARY_ENDPOINT", "")
        with TestClient(create_app(session=session)) as client:
            client.put("/api/queue", json={"tracks": TRACKS})

            assert client.post("/api/library/t1/toggle-like").status_code == 503


class TestNotificationRoutes:
    """Test /api/notifications."""

    def test_failure_is_listed(self, client, resolver):
        """Test that a failed resolution shows up as an error notification."""
        resolver.resolve.side_effect = StreamResolutionError("t1", "endpoint reported failure")

        state = client.put("/api/queue", json={"tracks": TRACKS}).json()
        notifications = client.get("/api/notifications").json()["notifications"]

        assert state["current_index"] == 0
        assert len(notifications) == 1
        assert notifications[0]["level"] == "error"
        assert notifications[0]["track_id"] == "t1"

    def test_empty_history(self, client):
        """Test no notifications initially."""
        assert client.get("/api/notifications").json() == {"notifications": []}


class TestWebSocket:
    """Test the /ws endpoint."""

    def test_ping_pong(self, client):
        """Test the keepalive echo."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("ping")

            assert websocket.receive_text() == "pong"

    def test_state_changes_are_broadcast(self, client):
        """Test that a player change is pushed to connected clients."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"

            client.post("/api/queue/add", json={"track": track_json("t1")})
            message = websocket.receive_json()

            assert message["event"] == "player:state"
            assert message["data"]["queue"][0]["id"] == "t1"
