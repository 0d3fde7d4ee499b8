"""Integer-keyed listener registry."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

NO_LISTENER = 0


class ListenerRegistry:
    """Listeners keyed by monotonically increasing ids starting at 1.

    ``notify`` snapshots the registry under the lock and calls the
    listeners after releasing it, so a listener may add or remove
    listeners (or call back into its owner) freely.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: dict[int, Callable] = {}
        self._next_id = 1

    def add(self, listener: Callable) -> int:
        with self._lock:
            listener_id = self._next_id
            self._next_id += 1
            self._listeners[listener_id] = listener
        return listener_id

    def remove(self, listener_id: int) -> None:
        with self._lock:
            self._listeners.pop(listener_id, None)

    def notify(self, *args) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener(*args)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
