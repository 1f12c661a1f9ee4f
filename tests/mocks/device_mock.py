from core.device import DeviceEvent, OutputDevice


class FakeOutputDevice(OutputDevice):
    """In-memory output device for unit testing.

    Records every call and lets tests fire the device's events by hand.
    """

    def __init__(self):
        super().__init__()
        self.url = None
        self.playing = False
        self.volume = None
        self._position = 0.0
        self._duration = 0.0
        self.calls = []
        self.play_error = None

    def load(self, url):
        self.calls.append(("load", url))
        self.url = url
        self.playing = False
        self._position = 0.0
        self._duration = 0.0

    def play(self):
        self.calls.append(("play", self.url))
        if self.play_error is not None:
            raise self.play_error
        self.playing = True

    def pause(self):
        self.calls.append(("pause",))
        self.playing = False

    def seek(self, seconds):
        self.calls.append(("seek", seconds))
        self._position = seconds

    def set_volume(self, level):
        self.calls.append(("set_volume", level))
        self.volume = level

    @property
    def position(self):
        return self._position

    @property
    def duration(self):
        return self._duration

    @property
    def loaded_urls(self):
        return [args[0] for name, *args in self.calls if name == "load"]

    # Test helpers (not part of the device interface)

    def report_metadata(self, duration):
        self._duration = duration
        self._emit(DeviceEvent.METADATA_LOADED, duration)

    def report_time(self, position):
        self._position = position
        self._emit(DeviceEvent.TIME_UPDATE, position)

    def finish(self):
        self.playing = False
        self._emit(DeviceEvent.ENDED)

    def fail(self, message="decoder error"):
        self.playing = False
        self._emit(DeviceEvent.ERROR, message)
