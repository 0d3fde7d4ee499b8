"""Stack of view frames."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

MAX_DEPTH = 32

ChangeCallback = Callable[[str, dict], None]


@dataclass(frozen=True)
class Frame:
    view_id: str
    params: dict[str, Any] = field(default_factory=dict)


class NavigationController:
    """LIFO of frames that never drops below the root frame.

    ``on_change`` receives the new top frame's id and params after every
    push, replace and effective pop; it runs outside the internal lock.
    ``active_view`` returns whatever object currently renders the top
    frame, so callers can forward lifecycle events to it.
    """

    def __init__(self, root: Frame):
        self._lock = threading.Lock()
        self._frames: list[Frame] = [root]
        self.on_change: ChangeCallback | None = None
        self.active_view: Callable[[], Any] = lambda: None

    def _publish(self, frame: Frame) -> None:
        if self.on_change is not None:
            self.on_change(frame.view_id, frame.params)

    def push(self, view_id: str, params: dict[str, Any] | None = None) -> None:
        frame = Frame(view_id, dict(params or {}))
        with self._lock:
            self._frames.append(frame)
            if len(self._frames) > MAX_DEPTH:
                # keep the root, forget the oldest frame above it
                del self._frames[1]
        logger.debug("push %s", view_id)
        self._publish(frame)

    def replace(self, view_id: str, params: dict[str, Any] | None = None) -> None:
        frame = Frame(view_id, dict(params or {}))
        with self._lock:
            self._frames[-1] = frame
        logger.debug("replace top with %s", view_id)
        self._publish(frame)

    def pop(self) -> bool:
        """Drop the top frame. Returns False (and does nothing) at the root."""
        with self._lock:
            if len(self._frames) <= 1:
                return False
            self._frames.pop()
            top = self._frames[-1]
        logger.debug("pop back to %s", top.view_id)
        self._publish(top)
        return True

    def current(self) -> Frame:
        with self._lock:
            return self._frames[-1]

    def depth(self) -> int:
        with self._lock:
            return len(self._frames)

    def update_params(self, params: dict[str, Any]) -> None:
        """Rewrite the top frame's params without notifying."""
        with self._lock:
            self._frames[-1] = Frame(self._frames[-1].view_id, dict(params))
