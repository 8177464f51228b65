"""
Notification Queue

Holds the one transient message the dashboard shows. Each emission bumps a
sequence number and re-arms a single hide timer keyed to that number; a timer
only hides the message if no newer emission happened since it was armed.
"""

import logging
import threading
from typing import Callable, List, Optional

from dashboard.models import Notification, Severity

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 2000

STYLE_FOR_SEVERITY = {
    Severity.SUCCESS: ("bg-success text-white", "fa-check-circle"),
    Severity.ERROR: ("bg-danger text-white", "fa-times-circle"),
    Severity.WARNING: ("bg-warning text-white", "fa-exclamation-triangle"),
    Severity.INFO: ("bg-primary text-white", "fa-info-circle"),
}

Listener = Callable[[Notification], None]


class NotificationQueue:
    def __init__(self, duration_ms: int = DEFAULT_DURATION_MS):
        self.duration_ms = duration_ms

        self._lock = threading.Lock()
        self._message = ""
        self._severity = Severity.INFO
        self._sequence = 0
        self._visible = False
        self._timer: Optional[threading.Timer] = None
        self._listeners: List[Listener] = []

    def emit(self, message: str, severity=Severity.INFO) -> int:
        """Show a message, replacing the current one. Returns its sequence number."""
        severity = Severity(severity)
        with self._lock:
            self._sequence += 1
            sequence = self._sequence
            self._message = message
            self._severity = severity
            self._visible = True

            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.duration_ms / 1000.0, self._expire, args=(sequence,))
            timer.daemon = True
            self._timer = timer
            snapshot = self._snapshot()
        timer.start()

        logger.debug(f"Notification #{sequence} [{severity.value}]: {message}")
        self._notify(snapshot)
        return sequence

    def _expire(self, sequence: int):
        with self._lock:
            if sequence != self._sequence or not self._visible:
                return
            self._visible = False
            self._timer = None
            snapshot = self._snapshot()
        self._notify(snapshot)

    def _snapshot(self) -> Notification:
        return Notification(
            message=self._message,
            severity=self._severity,
            sequence=self._sequence,
            visible=self._visible,
        )

    @property
    def current(self) -> Notification:
        with self._lock:
            return self._snapshot()

    def add_listener(self, listener: Listener):
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, snapshot: Notification):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}", exc_info=True)

    def close(self):
        """Cancel the pending hide timer and drop every listener."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._listeners.clear()
