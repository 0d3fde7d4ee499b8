"""Per-plugin runtime state: selection grid, scroll, view mode and search."""

from __future__ import annotations

import threading

from tiki.listeners import ListenerRegistry
from tiki.model.search import GridSelection, LaneSelection, SearchState, SelectionSnapshot
from tiki.plugin.definition import COMPACT, EXPANDED, Plugin

UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"


class PluginConfig:
    """Selection and search state for one plugin, guarded by its own lock.

    Each lane lays its tickets out row-major in ``lane.columns`` columns.
    Listeners run after the lock is released.
    """

    def __init__(self, plugin: Plugin):
        self.plugin = plugin
        self._lock = threading.RLock()
        self._lane_names = [lane.name for lane in plugin.lanes]
        self._columns = [lane.columns for lane in plugin.lanes]
        lanes = max(len(plugin.lanes), 1)
        self._lane = 0
        self._rows = [0] * lanes
        self._scroll = [0] * lanes
        self._view_mode = plugin.view_mode
        self._search = SearchState()
        self._listeners = ListenerRegistry()

    # --- Listeners ---

    def add_listener(self, listener) -> int:
        return self._listeners.add(listener)

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.remove(listener_id)

    def _changed(self) -> None:
        self._listeners.notify()

    # --- Selection ---

    @property
    def lane_count(self) -> int:
        return len(self._rows)

    @property
    def selected_lane(self) -> int:
        with self._lock:
            return self._lane

    def selected_index(self, lane: int | None = None) -> int:
        with self._lock:
            return self._rows[self._lane if lane is None else lane]

    def columns(self, lane: int) -> int:
        return self._columns[lane] if lane < len(self._columns) else 1

    def set_selection(self, lane: int, index: int) -> None:
        with self._lock:
            if not 0 <= lane < len(self._rows):
                return
            self._lane = lane
            self._rows[lane] = max(index, 0)
        self._changed()

    def move_selection(self, direction: str, lane_size: int) -> bool:
        """Move within the current lane's grid. Returns False at an edge."""
        with self._lock:
            lane = self._lane
            columns = self.columns(lane)
            index = self._rows[lane]
            row, column = divmod(index, columns)
            target = None
            if direction == LEFT and column > 0:
                target = index - 1
            elif direction == RIGHT and column < columns - 1 and index + 1 < lane_size:
                target = index + 1
            elif direction == UP and row > 0:
                target = index - columns
            elif direction == DOWN and index + columns < lane_size:
                target = index + columns
            if target is None:
                return False
            self._rows[lane] = target
        self._changed()
        return True

    def clamp_selection(self, lane_sizes: list[int]) -> None:
        """Keep every lane's selection inside its current item count."""
        changed = False
        with self._lock:
            for lane, size in enumerate(lane_sizes[: len(self._rows)]):
                clamped = min(self._rows[lane], max(size - 1, 0))
                if clamped != self._rows[lane]:
                    self._rows[lane] = clamped
                    changed = True
        if changed:
            self._changed()

    def scroll_offset(self, lane: int) -> int:
        with self._lock:
            return self._scroll[lane]

    def ensure_visible(self, lane: int, visible_rows: int) -> int:
        """Adjust the lane's scroll offset (in grid rows) so its selection shows."""
        with self._lock:
            row = self._rows[lane] // self.columns(lane)
            offset = self._scroll[lane]
            if row < offset:
                offset = row
            elif visible_rows > 0 and row >= offset + visible_rows:
                offset = row - visible_rows + 1
            self._scroll[lane] = offset
            return offset

    # --- View mode ---

    @property
    def view_mode(self) -> str:
        with self._lock:
            return self._view_mode

    def toggle_view_mode(self) -> str:
        with self._lock:
            self._view_mode = COMPACT if self._view_mode == EXPANDED else EXPANDED
            mode = self._view_mode
        self._changed()
        return mode

    # --- Search ---

    @property
    def search(self) -> SearchState:
        """A copy of the search state."""
        with self._lock:
            return self._search.copy()

    def _snapshot(self) -> SelectionSnapshot:
        if len(self._rows) == 1:
            return GridSelection(self._rows[0])
        return LaneSelection(self._lane_names[self._lane], self._rows[self._lane])

    def _restore(self, snapshot: SelectionSnapshot | None) -> None:
        match snapshot:
            case GridSelection(index=index):
                self._lane = 0
                self._rows[0] = index
            case LaneSelection(lane_name=name, row=row) if name in self._lane_names:
                self._lane = self._lane_names.index(name)
                self._rows[self._lane] = row

    def open_search(self) -> None:
        """Show the query input, remembering the selection on first open."""
        with self._lock:
            if self._search.saved is None:
                self._search.saved = self._snapshot()
            self._search.editing = True
        self._changed()

    def set_search_query(self, query: str) -> None:
        with self._lock:
            self._search.query = query
        self._changed()

    def apply_search_results(self, results: dict[int, list[str]]) -> None:
        """Activate the search with per-lane ticket ids and select the first hit."""
        with self._lock:
            self._search.results = {k: list(v) for k, v in results.items()}
            self._search.editing = False
            self._rows = [0] * len(self._rows)
            self._lane = next((lane for lane in range(len(self._rows)) if results.get(lane)), self._lane)
        self._changed()

    def clear_search(self) -> None:
        """Drop query and results and restore the selection from before the search."""
        with self._lock:
            saved = self._search.saved
            self._search = SearchState()
            self._restore(saved)
        self._changed()
