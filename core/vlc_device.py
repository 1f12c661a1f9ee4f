import vlc
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from core.device import DeviceEvent, OutputDevice
from core.logging import log_player_action


class VlcOutputDevice(OutputDevice):
    """Output device backed by a libvlc media player.

    libvlc fires events on its own thread and forbids calling back into
    libvlc from inside an event callback, so every event is handed to
    ``dispatch`` before subscribers run. The default dispatcher is a
    single worker thread, which keeps events in order.
    """

    def __init__(self, dispatch: Callable | None = None, vlc_args: tuple[str, ...] = ()):
        super().__init__()
        self.instance = vlc.Instance(*vlc_args)
        self.media_player = self.instance.media_player_new()
        self._event_worker = None
        if dispatch is None:
            self._event_worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vlc-events")
            dispatch = self._event_worker.submit
        self._dispatch = dispatch
        self._url = None
        self._started = False
        # libvlc drops set_time on media that has not started yet
        self._pending_seek_ms = None

        events = self.media_player.event_manager()
        events.event_attach(vlc.EventType.MediaPlayerTimeChanged, self._on_time_changed)
        events.event_attach(vlc.EventType.MediaPlayerLengthChanged, self._on_length_changed)
        events.event_attach(vlc.EventType.MediaPlayerEndReached, self._on_end_reached)
        events.event_attach(vlc.EventType.MediaPlayerEncounteredError, self._on_error)

    def load(self, url: str) -> None:
        self._url = url
        self._started = False
        self._pending_seek_ms = None
        media = self.instance.media_new(url)
        self.media_player.set_media(media)

    def play(self) -> None:
        if self.media_player.get_media() is None:
            return
        if self.media_player.play() == -1:
            raise RuntimeError(f"libvlc refused to play {self._url}")
        self._started = True
        if self._pending_seek_ms is not None:
            self.media_player.set_time(self._pending_seek_ms)
            self._pending_seek_ms = None

    def pause(self) -> None:
        # set_pause(1) pauses; pause() would toggle
        self.media_player.set_pause(1)

    def seek(self, seconds: float) -> None:
        time_ms = int(seconds * 1000)
        if not self._started:
            self._pending_seek_ms = time_ms
            return
        self.media_player.set_time(time_ms)

    def set_volume(self, level: float) -> None:
        volume = int(round(max(0.0, min(1.0, level)) * 100))
        self.media_player.audio_set_volume(volume)

    @property
    def position(self) -> float:
        if self._pending_seek_ms is not None:
            return self._pending_seek_ms / 1000
        time_ms = self.media_player.get_time()
        return max(0, time_ms) / 1000

    @property
    def duration(self) -> float:
        length_ms = self.media_player.get_length()
        return max(0, length_ms) / 1000

    def release(self) -> None:
        """Release libvlc resources."""
        self.media_player.stop()
        self.media_player.set_media(None)
        self.media_player.release()
        self.instance.release()
        if self._event_worker is not None:
            self._event_worker.shutdown(wait=False)
        log_player_action("vlc_cleanup", trigger_source="cleanup", description="VLC resources released")

    # libvlc callbacks, called on the libvlc thread

    def _on_time_changed(self, event):
        self._dispatch(self._emit, DeviceEvent.TIME_UPDATE, event.u.new_time / 1000)

    def _on_length_changed(self, event):
        self._dispatch(self._emit, DeviceEvent.METADATA_LOADED, event.u.new_length / 1000)

    def _on_end_reached(self, event):
        self._dispatch(self._emit, DeviceEvent.ENDED)

    def _on_error(self, event):
        self._dispatch(self._emit, DeviceEvent.ERROR, f"libvlc could not play {self._url}")
