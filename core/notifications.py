"""User-visible notifications (toasts) raised by the player."""

import threading
from collections import deque
from collections.abc import Callable
from core.logging import app_logger, log_error
from core.models import Notification
from eliot import log_message


class NotificationCenter:
    """Keeps recent notifications and fans them out to subscribers."""

    def __init__(self, history_size: int = 50):
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._subscribers: list[Callable[[Notification], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, level: str, message: str, track_id: str | None = None) -> Notification:
        """Record a notification and deliver it to every subscriber."""
        notification = Notification(level=level, message=message, track_id=track_id)
        with self._lock:
            self._history.append(notification)

        log_message(message_type="notification", level=level, track_id=track_id, description=message)

        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception as e:
                log_error(app_logger, e, notification=message)
        return notification

    def error(self, message: str, track_id: str | None = None) -> Notification:
        return self.publish("error", message, track_id)

    def success(self, message: str, track_id: str | None = None) -> Notification:
        return self.publish("success", message, track_id)

    def recent(self) -> list[Notification]:
        """Notifications oldest first."""
        with self._lock:
            return list(self._history)
