from tests.mocks.device_mock import FakeOutputDevice
from tests.mocks.executor_mock import InlineExecutor, ManualExecutor
from tests.mocks.resolver_mock import signed_stream, signed_url
from tests.mocks.vlc_mock import (
    MockEvent,
    MockEventManager,
    MockEventType,
    MockInstance,
    MockMedia,
    MockMediaPlayer,
)

__all__ = [
    'FakeOutputDevice',
    'InlineExecutor',
    'ManualExecutor',
    'MockEvent',
    'MockEventManager',
    'MockEventType',
    'MockInstance',
    'MockMedia',
    'MockMediaPlayer',
    'signed_stream',
    'signed_url',
]
