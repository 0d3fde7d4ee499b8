"""Search state kept per plugin."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GridSelection:
    """Selection in a single-lane plugin."""

    index: int


@dataclass(frozen=True)
class LaneSelection:
    """Selection in a multi-lane plugin, by lane name so it survives lane reordering."""

    lane_name: str
    row: int


SelectionSnapshot = GridSelection | LaneSelection


@dataclass
class SearchState:
    """Inactive while ``results`` is None.

    ``editing`` means the query input is open; ``saved`` is the selection
    to restore when the search is cleared.
    """

    editing: bool = False
    query: str = ""
    results: dict[int, list[str]] | None = None
    saved: SelectionSnapshot | None = None

    @property
    def active(self) -> bool:
        return self.results is not None

    def copy(self) -> SearchState:
        results = None if self.results is None else {k: list(v) for k, v in self.results.items()}
        return SearchState(self.editing, self.query, results, self.saved)
