import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.models import Track
from core.notifications import NotificationCenter
from core.resolver import StreamResolver
from core.session import PlaybackSession
from hypothesis import settings
from tests.mocks import FakeOutputDevice, InlineExecutor, ManualExecutor, signed_stream

# Register Hypothesis profiles
settings.register_profile("fast", max_examples=50, deadline=None)
settings.register_profile("thorough", max_examples=1000, deadline=None)
settings.load_profile("fast")  # Default to fast profile


def pytest_collection_modifyitems(items):
    """Automatically order tests: unit tests first, then property tests.

    Individual tests marked with @pytest.mark.order("last") will run at the very end.
    """
    for item in items:
        # Skip if item already has explicit order marker
        if hasattr(item, 'get_closest_marker') and item.get_closest_marker('order'):
            continue

        # Assign order based on test file name
        test_file = str(item.fspath)
        if 'test_unit_' in test_file:
            item.add_marker(pytest.mark.order(1))
        elif 'test_props_' in test_file:
            item.add_marker(pytest.mark.order(2))


@pytest.fixture
def make_track():
    """Factory for catalogue tracks.

    Usage: ``make_track("t1", duration=200)``
    """

    def _make(track_id="t1", **fields):
        fields.setdefault("title", f"Song {track_id}")
        fields.setdefault("artist_name", "Test Artist")
        fields.setdefault("duration", 180.0)
        return Track(id=track_id, **fields)

    return _make


@pytest.fixture
def tracks(make_track):
    """Three distinct tracks: t1, t2, t3."""
    return [make_track("t1"), make_track("t2"), make_track("t3")]


@pytest.fixture
def device():
    return FakeOutputDevice()


@pytest.fixture
def resolver():
    """Mock StreamResolver that signs every track."""
    mock = Mock(spec=StreamResolver)
    mock.resolve.side_effect = signed_stream
    return mock


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def session(device, resolver, notifications, inline_executor):
    """PlaybackSession whose resolutions complete synchronously."""
    return PlaybackSession(
        device=device,
        resolver=resolver,
        notifications=notifications,
        listener_address="0xlistener",
        executor=inline_executor,
    )


@pytest.fixture
def deferred_session(device, resolver, notifications, manual_executor):
    """PlaybackSession whose resolutions complete only when the test runs them."""
    return PlaybackSession(
        device=device,
        resolver=resolver,
        notifications=notifications,
        listener_address="0xlistener",
        executor=manual_executor,
    )
