"""Layout and header models observed by the UI."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tiki.listeners import ListenerRegistry


class LayoutModel:
    """Which view occupies the content area."""

    def __init__(self, view_id: str = "", params: dict[str, Any] | None = None):
        self._lock = threading.Lock()
        self._view_id = view_id
        self._params = dict(params or {})
        self._revision = 0
        self._listeners = ListenerRegistry()

    def add_listener(self, listener) -> int:
        return self._listeners.add(listener)

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.remove(listener_id)

    def set_content(self, view_id: str, params: dict[str, Any] | None = None) -> None:
        with self._lock:
            self._view_id = view_id
            self._params = dict(params or {})
            self._revision += 1
        self._listeners.notify()

    @property
    def content(self) -> tuple[str, dict[str, Any]]:
        with self._lock:
            return self._view_id, dict(self._params)

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision


@dataclass(frozen=True)
class BurndownPoint:
    date: datetime
    points: int


@dataclass(frozen=True)
class HeaderState:
    visible: bool = True
    stats: tuple[tuple[str, str], ...] = ()
    burndown: tuple[BurndownPoint, ...] = ()
    hints: tuple[tuple[str, str], ...] = ()
    message: str = ""


@dataclass
class HeaderModel:
    """Header bar contents; every setter notifies listeners outside the lock."""

    visible: bool = True
    _stats: list[tuple[str, str]] = field(default_factory=list)
    _burndown: list[BurndownPoint] = field(default_factory=list)
    _hints: list[tuple[str, str]] = field(default_factory=list)
    _message: str = ""
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _listeners: ListenerRegistry = field(default_factory=ListenerRegistry, repr=False)

    def add_listener(self, listener) -> int:
        return self._listeners.add(listener)

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.remove(listener_id)

    def _set(self, **changes) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(self, name, value)
        self._listeners.notify()

    def set_visible(self, visible: bool) -> None:
        self._set(visible=visible)

    def toggle(self) -> bool:
        with self._lock:
            self.visible = not self.visible
            visible = self.visible
        self._listeners.notify()
        return visible

    def set_stats(self, stats: list[tuple[str, str]]) -> None:
        self._set(_stats=list(stats))

    def set_burndown(self, points: list[BurndownPoint]) -> None:
        self._set(_burndown=list(points))

    def set_hints(self, hints: list[tuple[str, str]]) -> None:
        """``(key display, label)`` pairs for the current view's actions."""
        self._set(_hints=list(hints))

    def set_message(self, message: str) -> None:
        self._set(_message=message)

    def snapshot(self) -> HeaderState:
        with self._lock:
            return HeaderState(
                self.visible,
                tuple(self._stats),
                tuple(self._burndown),
                tuple(self._hints),
                self._message,
            )
