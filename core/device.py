"""Output device abstraction.

The session drives exactly one single-stream output device through this
interface, so the playback logic can run against a fake in tests and
against VLC in production.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from core.logging import log_error, player_logger
from enum import Enum


class DeviceEvent(str, Enum):
    """Asynchronous signals emitted by an output device."""

    TIME_UPDATE = "time_update"  # payload: position in seconds
    METADATA_LOADED = "metadata_loaded"  # payload: duration in seconds
    ENDED = "ended"
    ERROR = "error"  # payload: error description


class OutputDevice(ABC):
    """A single-stream audio output.

    Positions and durations are in seconds, volume is in [0, 1].
    """

    def __init__(self):
        self._subscribers: dict[DeviceEvent, list[Callable]] = {event: [] for event in DeviceEvent}

    def subscribe(self, event: DeviceEvent, callback: Callable) -> None:
        """Register ``callback`` for ``event``."""
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: DeviceEvent, callback: Callable) -> None:
        if callback in self._subscribers[event]:
            self._subscribers[event].remove(callback)

    def _emit(self, event: DeviceEvent, *args) -> None:
        """Deliver ``event`` to every subscriber, logging subscriber failures."""
        for callback in list(self._subscribers[event]):
            try:
                callback(*args)
            except Exception as e:
                log_error(player_logger, e, device_event=event.value)

    @abstractmethod
    def load(self, url: str) -> None:
        """Set the source, resetting position to 0."""

    @abstractmethod
    def play(self) -> None:
        """Start or resume the loaded source."""

    @abstractmethod
    def pause(self) -> None:
        """Pause without resetting the position."""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Move the position of the loaded source.

        May be called before the first ``play()``; the position then applies
        once playback starts.
        """

    @abstractmethod
    def set_volume(self, level: float) -> None:
        """Set the output level in [0, 1]."""

    @property
    @abstractmethod
    def position(self) -> float:
        """Current position in seconds."""

    @property
    @abstractmethod
    def duration(self) -> float:
        """Duration of the loaded source in seconds, 0 if unknown."""

    def release(self) -> None:
        """Release native resources. Default: nothing to release."""
