"""Plugin board: lanes of tickets for one tiki plugin."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from tiki.controller.plugin import PluginController
from tiki.plugin.definition import COMPACT
from tiki.ui.ticket_box import box_height, render_lane


class BoardView(Vertical):
    """Renders whichever plugin controller it is pointed at."""

    DEFAULT_CSS = """
    BoardView {
        height: 1fr;
    }
    BoardView #board-title {
        height: 1;
        text-style: bold;
        background: $primary-darken-2;
        padding: 0 1;
    }
    BoardView #board-search {
        height: 1;
        display: none;
        padding: 0 1;
        background: $surface;
    }
    BoardView #board-search.visible {
        display: block;
    }
    BoardView #board-lanes {
        height: 1fr;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller: PluginController | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="board-title")
        yield Static(id="board-search")
        yield Static(id="board-lanes")

    def show(self, controller: PluginController) -> None:
        self.controller = controller
        self.refresh_view()

    def _visible_rows(self, compact: bool) -> int:
        # lane header row plus panel borders
        height = self.query_one("#board-lanes", Static).size.height - 2
        return max(height // box_height(compact), 1) if height > 0 else 0

    def refresh_view(self) -> None:
        controller = self.controller
        if controller is None or not self.is_mounted:
            return
        plugin = controller.plugin
        config = controller.config
        compact = config.view_mode == COMPACT
        lanes = controller.all_lanes()

        title = Text(plugin.name, style="bold")
        if plugin.key_display:
            title.append(f"  [{plugin.key_display}]", style="dim")
        title.append(f"  {sum(len(t) for t in lanes)} tickets", style="dim")
        self.query_one("#board-title", Static).update(title)

        search = config.search
        search_bar = self.query_one("#board-search", Static)
        search_bar.set_class(search.editing or search.active, "visible")
        if search.editing:
            search_bar.update(Text(f"/ {search.query}▏"))
        elif search.active:
            search_bar.update(Text(f"search: {search.query}  (Esc clears)", style="italic"))

        table = Table(expand=True, show_edge=False, box=None, padding=(0, 1))
        rows = self._visible_rows(compact)
        cells = []
        for i, (lane, tickets) in enumerate(zip(plugin.lanes, lanes)):
            current = i == config.selected_lane
            table.add_column(
                Text(f"{lane.name} ({len(tickets)})", style="bold underline" if current else "bold"),
                ratio=lane.columns,
            )
            first_row = config.ensure_visible(i, rows)
            selected = config.selected_index(i) if current else None
            cells.append(render_lane(tickets, lane.columns, compact, selected, first_row, rows))
        if cells:
            table.add_row(*cells)
        self.query_one("#board-lanes", Static).update(table)

    def on_resize(self) -> None:
        self.refresh_view()
