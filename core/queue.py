import threading
from core.logging import log_queue_operation
from core.models import NO_TRACK, Track


class QueueManager:
    """Manages the playback queue in-memory (session-only, not persisted).

    The queue is an ordered list of Track objects with a pointer
    (``current_index``) at the entry loaded into the output device.
    ``current_index`` is either NO_TRACK or a valid index into the queue.
    """

    def __init__(self):
        self.queue_items: list[Track] = []
        self.current_index = NO_TRACK
        self._lock = threading.RLock()

    def populate_and_play(self, tracks: list[Track], start_index: int = 0) -> Track | None:
        """Replace queue with new tracks and set current position.

        Args:
            tracks: Tracks to load, in playback order
            start_index: Index to start playback from, clamped into range

        Returns:
            Track to play, or None if empty
        """
        with self._lock:
            log_queue_operation("populate_and_play", count=len(tracks), start_index=start_index)

            if not tracks:
                self.clear_queue()
                return None

            self.queue_items = list(tracks)
            self.current_index = max(0, min(start_index, len(self.queue_items) - 1))
            return self.queue_items[self.current_index]

    def find_index(self, track_id: str) -> int | None:
        """Return the first queue index holding ``track_id``, or None."""
        for index, track in enumerate(self.queue_items):
            if track.id == track_id:
                return index
        return None

    def add_to_queue_end(self, track: Track) -> int:
        """Append a track to the end of the queue.

        Returns:
            Index of the appended track
        """
        with self._lock:
            self.queue_items.append(track)
            log_queue_operation("add_to_queue_end", track_id=track.id, queue_size=len(self.queue_items))
            return len(self.queue_items) - 1

    def insert_after_current(self, track: Track) -> int:
        """Insert a track right after the current one (at the front if nothing is current).

        The pointer never moves because the insertion is always after it.

        Returns:
            Index the track was inserted at
        """
        with self._lock:
            insert_pos = self.current_index + 1
            self.queue_items.insert(insert_pos, track)
            log_queue_operation("insert_after_current", track_id=track.id, position=insert_pos, current_index=self.current_index)
            return insert_pos

    def remove_from_queue_at_index(self, index: int) -> bool:
        """Remove track at specific index.

        The pointer is clamped to the nearest valid index: it shifts down when
        an earlier entry is removed, stays put (now addressing the following
        entry) when the current entry is removed, and falls back to the new
        last entry when the removed current entry was last.

        Args:
            index: Index of track to remove

        Returns:
            True if an entry was removed
        """
        with self._lock:
            if not (0 <= index < len(self.queue_items)):
                return False

            track = self.queue_items.pop(index)
            log_queue_operation("remove", index=index, track_id=track.id, current_index=self.current_index)

            if self.current_index == NO_TRACK:
                return True

            if index < self.current_index:
                self.current_index -= 1
            elif not self.queue_items:
                self.current_index = NO_TRACK
            elif self.current_index >= len(self.queue_items):
                self.current_index = len(self.queue_items) - 1
            return True

    def remove_track(self, track_id: str) -> list[int]:
        """Remove every entry of ``track_id`` from the queue.

        Returns:
            Original indexes of the removed entries, ascending
        """
        with self._lock:
            removed = [i for i, track in enumerate(self.queue_items) if track.id == track_id]
            for index in reversed(removed):
                self.remove_from_queue_at_index(index)
            return removed

    def clear_queue(self) -> None:
        """Clear all items from the queue."""
        with self._lock:
            log_queue_operation("clear", count=len(self.queue_items))
            self.queue_items = []
            self.current_index = NO_TRACK

    def set_current_index(self, index: int) -> Track | None:
        """Point at ``index`` if it is valid.

        Returns:
            The track now current, or None if the index was out of range
        """
        with self._lock:
            if not (0 <= index < len(self.queue_items)):
                return None
            self.current_index = index
            return self.queue_items[index]

    def get_current_track(self) -> Track | None:
        """Get the current track, or None if nothing is loaded."""
        if 0 <= self.current_index < len(self.queue_items):
            return self.queue_items[self.current_index]
        return None

    def get_queue_items(self) -> list[Track]:
        """Get a copy of the queue in playback order."""
        return list(self.queue_items)

    def get_queue_count(self) -> int:
        return len(self.queue_items)

    def get_next_track_index(self) -> int | None:
        """Index of the track after the current one, wrapping to 0 at the end.

        Returns:
            Next index, or None if the queue is empty
        """
        total_items = len(self.queue_items)
        if total_items == 0:
            return None
        if self.current_index < total_items - 1:
            return self.current_index + 1
        return 0

    def get_previous_track_index(self) -> int | None:
        """Index of the track before the current one.

        Returns:
            Previous index, or None when at the beginning (or nothing is current)
        """
        if self.current_index > 0:
            return self.current_index - 1
        return None

    def next_track(self) -> Track | None:
        """Advance to next track in queue, looping back to the start.

        Returns:
            The new current track, or None if the queue is empty
        """
        with self._lock:
            next_index = self.get_next_track_index()
            if next_index is None:
                return None
            self.current_index = next_index
            return self.queue_items[next_index]

    def previous_track(self) -> Track | None:
        """Go to previous track in queue.

        Returns:
            The new current track, or None if at the beginning
        """
        with self._lock:
            prev_index = self.get_previous_track_index()
            if prev_index is None:
                return None
            self.current_index = prev_index
            return self.queue_items[prev_index]
