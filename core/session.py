import threading
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from config import DEFAULT_VOLUME, RESOLVER_WORKERS, RESTART_THRESHOLD_SECONDS
from core.device import DeviceEvent, OutputDevice
from core.logging import log_error, log_player_action, log_stream_resolution, player_logger, stream_logger
from core.models import NO_TRACK, PlaybackSnapshot, ResolvedStream, Track
from core.notifications import NotificationCenter
from core.queue import QueueManager
from core.resolver import StreamResolutionError, StreamResolver, StreamStatsReporter
from eliot import start_action


def _clamp_volume(level: float) -> float:
    return max(0.0, min(1.0, float(level)))


class PlaybackSession:
    """The playback session controller.

    Owns the queue, the pointer into it and the single output device. One
    instance lives for the whole application and is handed to whoever needs
    it; nothing else touches the device.

    Operations, device events and resolution completions are serialised by
    ``_playback_lock``. Resolving a locator runs on ``executor``; every
    pointer change bumps ``_selection_token`` and a resolution only takes
    effect if its token is still current when it completes.
    """

    def __init__(
        self,
        device: OutputDevice,
        resolver: StreamResolver,
        notifications: NotificationCenter,
        listener_address: str = "",
        queue_manager: QueueManager | None = None,
        executor: Executor | None = None,
        stream_reporter: StreamStatsReporter | None = None,
        volume: float = DEFAULT_VOLUME,
        restart_threshold: float = RESTART_THRESHOLD_SECONDS,
    ):
        self.device = device
        self.resolver = resolver
        self.notifications = notifications
        self.listener_address = listener_address
        self.queue_manager = queue_manager or QueueManager()
        self.stream_reporter = stream_reporter
        self.restart_threshold = restart_threshold
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=RESOLVER_WORKERS, thread_name_prefix="stream-resolver")

        self.is_playing = False
        self.volume = _clamp_volume(volume)
        self.current_time = 0.0
        self.duration = 0.0
        self.transaction_digest = None

        self._selection_token = 0
        self._pending_token = None  # token of the in-flight resolution
        self._loaded_token = None  # token whose locator is loaded in the device
        self._reported_token = None  # token whose stream was already counted
        self._state_listeners: list[Callable[[PlaybackSnapshot], None]] = []
        self._playback_lock = threading.RLock()

        self.device.set_volume(self.volume)
        self._device_handlers = {
            DeviceEvent.TIME_UPDATE: self._on_time_update,
            DeviceEvent.METADATA_LOADED: self._on_metadata_loaded,
            DeviceEvent.ENDED: self._on_track_end,
            DeviceEvent.ERROR: self._on_device_error,
        }
        for event, handler in self._device_handlers.items():
            self.device.subscribe(event, handler)

    # Read-only views

    @property
    def queue(self) -> list[Track]:
        return self.queue_manager.get_queue_items()

    @property
    def queue_index(self) -> int:
        return self.queue_manager.current_index

    @property
    def current_track(self) -> Track | None:
        return self.queue_manager.get_current_track()

    def snapshot(self) -> PlaybackSnapshot:
        """Copy of the whole session state."""
        with self._playback_lock:
            current = self.current_track
            return PlaybackSnapshot(
                queue=[track.model_copy() for track in self.queue_manager.queue_items],
                queue_index=self.queue_manager.current_index,
                current_track=current.model_copy() if current else None,
                is_playing=self.is_playing,
                volume=self.volume,
                current_time=self.current_time,
                duration=self.duration,
                transaction_digest=self.transaction_digest,
            )

    def add_state_listener(self, callback: Callable[[PlaybackSnapshot], None]) -> None:
        """Call ``callback`` with a snapshot after every state change."""
        self._state_listeners.append(callback)

    # Queue operations

    def replace_queue_and_play(self, tracks: list[Track], start_index: int = 0) -> None:
        """Replace the queue with ``tracks`` and play from ``start_index``."""
        with self._playback_lock, start_action(player_logger, "replace_queue_and_play"):
            if not tracks:
                self.clear_queue()
                return

            track = self.queue_manager.populate_and_play(tracks, start_index)
            log_player_action(
                "queue_replaced",
                trigger_source="user",
                track=track.display_name,
                queue_size=len(tracks),
                start_index=self.queue_manager.current_index,
                description=f"Playing {track.display_name} ({self.queue_manager.current_index + 1}/{len(tracks)})",
            )
            self.is_playing = True
            self._select_current()
            self._notify_state()

    def play_track(self, track: Track) -> None:
        """Play ``track``, jumping to it if it is already queued, else appending it."""
        with self._playback_lock, start_action(player_logger, "play_track"):
            index = self.queue_manager.find_index(track.id)
            if index is None:
                index = self.queue_manager.add_to_queue_end(track)

            log_player_action("play_track", trigger_source="user", track=track.display_name, queue_index=index)

            if index == self.queue_manager.current_index and self._selection_active():
                self.is_playing = True
                self._ensure_playing()
            else:
                self.queue_manager.set_current_index(index)
                self.is_playing = True
                self._select_current()
            self._notify_state()

    def add_to_queue(self, track: Track) -> None:
        """Append ``track``; starts playback if nothing was loaded."""
        with self._playback_lock:
            index = self.queue_manager.add_to_queue_end(track)
            log_player_action("add_to_queue", trigger_source="user", track=track.display_name, queue_index=index)

            if self.queue_manager.current_index == NO_TRACK:
                self.queue_manager.set_current_index(index)
                self.is_playing = True
                self._select_current()
            self._notify_state()

    def play_next(self, track: Track) -> None:
        """Insert ``track`` right after the current one without touching playback."""
        with self._playback_lock:
            index = self.queue_manager.insert_after_current(track)
            log_player_action("play_next", trigger_source="user", track=track.display_name, queue_index=index)
            self._notify_state()

    def remove_from_queue(self, track_id: str) -> int:
        """Remove every queued entry of ``track_id``.

        Returns:
            Number of entries removed
        """
        with self._playback_lock:
            old_index = self.queue_manager.current_index
            removed = self.queue_manager.remove_track(track_id)
            if removed:
                log_player_action("remove_from_queue", trigger_source="user", track_id=track_id, count=len(removed))
                self._after_removal(old_index in removed)
            return len(removed)

    def remove_at(self, index: int) -> bool:
        """Remove the queue entry at ``index``; out-of-range is a no-op."""
        with self._playback_lock:
            old_index = self.queue_manager.current_index
            if not self.queue_manager.remove_from_queue_at_index(index):
                return False
            log_player_action("remove_at", trigger_source="user", index=index)
            self._after_removal(index == old_index)
            return True

    def clear_queue(self) -> None:
        """Empty the queue and stop playback."""
        with self._playback_lock:
            log_player_action(
                "clear_queue",
                trigger_source="user",
                count=self.queue_manager.get_queue_count(),
                description="Queue cleared",
            )
            self.queue_manager.clear_queue()
            self._selection_token += 1
            self._pending_token = None
            self._loaded_token = None
            self.is_playing = False
            self.current_time = 0.0
            self.duration = 0.0
            self.transaction_digest = None
            self.device.pause()
            self._notify_state()

    # Transport

    def play(self) -> None:
        """Resume playback of the current track."""
        with self._playback_lock, start_action(player_logger, "play"):
            current = self.current_track
            if current is None:
                log_player_action("play_ignored", trigger_source="user", reason="no_current_track")
                return
            log_player_action(
                "play_pause_pressed",
                trigger_source="user",
                track=current.display_name,
                old_state="playing" if self.is_playing else "paused",
                new_state="playing",
            )
            self.is_playing = True
            self._ensure_playing()
            self._notify_state()

    def pause(self) -> None:
        """Pause playback, keeping the position."""
        with self._playback_lock, start_action(player_logger, "pause"):
            current = self.current_track
            log_player_action(
                "play_pause_pressed",
                trigger_source="user",
                track=current.display_name if current else "No track",
                old_state="playing" if self.is_playing else "paused",
                new_state="paused",
            )
            self.is_playing = False
            self.device.pause()
            self._notify_state()

    def toggle_play_pause(self) -> None:
        with self._playback_lock:
            if self.is_playing:
                self.pause()
            else:
                self.play()

    def next(self) -> None:
        """Advance to the next track, looping to the start after the last one."""
        with self._playback_lock, start_action(player_logger, "next_song"):
            self._advance(trigger_source="user")

    def previous(self) -> None:
        """Restart the current track, or go back one if it only just started."""
        with self._playback_lock, start_action(player_logger, "previous_song"):
            current = self.current_track
            if current is None:
                log_player_action("previous_song_no_track", trigger_source="user", reason="no_current_track")
                return

            if self.current_time > self.restart_threshold:
                self._restart_current("elapsed_over_threshold")
                return

            previous_track = self.queue_manager.previous_track()
            if previous_track is None:
                self._restart_current("start_of_queue")
                return

            log_player_action(
                "previous_track_selected",
                trigger_source="user",
                track=previous_track.display_name,
                description=f"Playing previous: {previous_track.display_name}",
            )
            self.is_playing = True
            self._select_current()
            self._notify_state()

    def set_volume(self, level: float) -> None:
        """Set the output level, clamped to [0, 1]."""
        with self._playback_lock:
            self.volume = _clamp_volume(level)
            self.device.set_volume(self.volume)
            log_player_action("volume_changed", trigger_source="user", volume=self.volume)
            self._notify_state()

    def seek(self, time: float) -> None:
        """Move to ``time`` seconds in the current track, clamped to [0, duration]."""
        with self._playback_lock, start_action(player_logger, "seek_operation"):
            if self.current_track is None:
                log_player_action("seek_operation_failed", trigger_source="user", reason="no_current_track")
                return

            target = max(0.0, float(time))
            if self.duration > 0:
                target = min(target, self.duration)

            log_player_action(
                "seek_operation",
                trigger_source="user",
                old_position=self.current_time,
                new_position=target,
                duration=self.duration,
            )
            self.current_time = target
            if self._loaded_token == self._selection_token:
                self.device.seek(target)
            self._notify_state()

    def shutdown(self) -> None:
        """Detach from the device and stop background work."""
        with self._playback_lock:
            self._selection_token += 1
            self.is_playing = False
            for event, handler in self._device_handlers.items():
                self.device.unsubscribe(event, handler)
            self.device.pause()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # Internals (callers hold _playback_lock)

    def _advance(self, trigger_source: str) -> None:
        next_track = self.queue_manager.next_track()
        if next_track is None:
            log_player_action("next_song_no_queue", trigger_source=trigger_source, reason="queue_empty")
            self.is_playing = False
            self.device.pause()
            self._notify_state()
            return

        log_player_action(
            "next_track_selected",
            trigger_source=trigger_source,
            track=next_track.display_name,
            queue_index=self.queue_manager.current_index,
            description=f"Playing next: {next_track.display_name}",
        )
        self.is_playing = True
        self._select_current()
        self._notify_state()

    def _after_removal(self, current_removed: bool) -> None:
        if self.queue_manager.get_queue_count() == 0:
            self.clear_queue()
            return
        if current_removed and self.current_track is not None:
            self._select_current()
        self._notify_state()

    def _restart_current(self, reason: str) -> None:
        current = self.current_track
        log_player_action(
            "restart_track",
            trigger_source="user",
            track=current.display_name,
            reason=reason,
            description=f"Restarting: {current.display_name}",
        )
        self.current_time = 0.0
        if self._loaded_token == self._selection_token:
            self.device.seek(0)
        self._notify_state()

    def _selection_active(self) -> bool:
        """True if the current selection is loaded or being resolved."""
        return self._selection_token in (self._loaded_token, self._pending_token)

    def _ensure_playing(self) -> None:
        if self._loaded_token == self._selection_token:
            self._start_device()
        elif self._pending_token != self._selection_token:
            # Last resolution failed; try again
            self._select_current()

    def _select_current(self) -> None:
        """Start loading the track at the pointer as a new selection."""
        track = self.current_track
        self._selection_token += 1
        token = self._selection_token
        self._pending_token = token
        self._loaded_token = None
        self.current_time = 0.0
        self.duration = track.duration or 0.0
        self.transaction_digest = None
        # Nothing from the previous selection may keep playing
        self.device.pause()
        self._executor.submit(self._resolve_and_load, token, track)

    def _resolve_and_load(self, token: int, track: Track) -> None:
        """Worker: resolve ``track`` and apply the result if still current."""
        with start_action(stream_logger, "resolve_stream", track_id=track.id):
            try:
                stream = self.resolver.resolve(track, self.listener_address)
            except StreamResolutionError as e:
                self._complete_resolution(token, track, None, e.reason)
                return
            except Exception as e:
                log_error(stream_logger, e, track_id=track.id)
                self._complete_resolution(token, track, None, str(e))
                return
            self._complete_resolution(token, track, stream, None)

    def _complete_resolution(self, token: int, track: Track, stream: ResolvedStream | None, error: str | None) -> None:
        with self._playback_lock:
            if token != self._selection_token:
                log_stream_resolution(
                    "discarded",
                    track.id,
                    description=f"selection moved on (token {token}, current {self._selection_token})",
                )
                return

            self._pending_token = None
            if stream is None:
                log_stream_resolution("failed", track.id, description=error)
                self._fail_playback(track, error)
                return

            log_stream_resolution("resolved", track.id, signed=stream.signed)
            self.transaction_digest = stream.transaction_digest
            self.device.load(stream.url)
            self.device.set_volume(self.volume)
            self._loaded_token = token
            if self.current_time > 0:
                self.device.seek(self.current_time)
            if self.is_playing:
                self._start_device()
            self._notify_state()

    def _start_device(self) -> None:
        track = self.current_track
        try:
            self.device.play()
        except Exception as e:
            log_error(player_logger, e, track_id=track.id)
            self._fail_playback(track, str(e))
            return

        log_player_action(
            "playback_started",
            trigger_source="device",
            track=track.display_name,
            description=f"Started playing: {track.display_name}",
        )
        if self.stream_reporter is not None and self._reported_token != self._selection_token:
            self._reported_token = self._selection_token
            self._executor.submit(self._report_stream, track)

    def _report_stream(self, track: Track) -> None:
        """Worker: count a started stream. Failures never affect playback."""
        try:
            self.stream_reporter.record_stream(track.id)
        except Exception as e:
            log_error(stream_logger, e, track_id=track.id, operation="record_stream")
            return
        with self._playback_lock:
            track.stream_count += 1

    def _fail_playback(self, track: Track, reason: str | None) -> None:
        self.is_playing = False
        self.device.pause()
        title = track.title or track.id
        self.notifications.error(f'Couldn\'t play "{title}": {reason or "unknown error"}', track_id=track.id)
        log_player_action(
            "playback_failed",
            trigger_source="automatic",
            track=track.display_name,
            reason=reason,
            description=f"Playback stopped for {track.display_name}: {reason}",
        )
        self._notify_state()

    def _notify_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for callback in list(self._state_listeners):
            try:
                callback(snapshot)
            except Exception as e:
                log_error(player_logger, e, listener=getattr(callback, "__name__", repr(callback)))

    # Device events

    def _on_time_update(self, position: float) -> None:
        with self._playback_lock:
            if self._loaded_token == self._selection_token:
                self.current_time = max(0.0, position)

    def _on_metadata_loaded(self, duration: float) -> None:
        with self._playback_lock:
            if self._loaded_token == self._selection_token and duration > 0:
                self.duration = duration
                self._notify_state()

    def _on_track_end(self) -> None:
        with self._playback_lock:
            if self._loaded_token != self._selection_token:
                log_player_action("track_end_ignored", trigger_source="automatic", reason="stale_stream")
                return
            # Guards against a late end event after pause or clear
            if not self.is_playing:
                log_player_action("track_end_ignored", trigger_source="automatic", reason="not_playing")
                return
            with start_action(player_logger, "track_end"):
                self._advance(trigger_source="automatic")

    def _on_device_error(self, message: str) -> None:
        with self._playback_lock:
            track = self.current_track
            if track is None:
                return
            if self._loaded_token != self._selection_token:
                log_player_action("device_error_ignored", trigger_source="device", reason=message)
                return
            log_player_action("device_error", trigger_source="device", track=track.display_name, reason=message)
            self._fail_playback(track, message)
