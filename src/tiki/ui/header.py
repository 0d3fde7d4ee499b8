"""Header bar: stats, key hints, burndown sparkline and the status message."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Sparkline, Static

from tiki.model.layout import HeaderState

MAX_HINTS_PER_COLUMN = 4


def render_stats(stats) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold")
    table.add_column()
    for label, value in stats:
        table.add_row(f"{label}:", value)
    return table


def render_hints(hints) -> Table:
    """Key hints in columns of at most MAX_HINTS_PER_COLUMN rows."""
    table = Table.grid(padding=(0, 2))
    columns = [hints[i : i + MAX_HINTS_PER_COLUMN] for i in range(0, len(hints), MAX_HINTS_PER_COLUMN)]
    for _ in columns:
        table.add_column(no_wrap=True)
    for row in range(min(len(hints), MAX_HINTS_PER_COLUMN)):
        cells = []
        for column in columns:
            if row < len(column):
                key, label = column[row]
                cells.append(Text.assemble((f"<{key}>", "bold yellow"), " ", label))
            else:
                cells.append("")
        table.add_row(*cells)
    return table


class HeaderBar(Vertical):
    DEFAULT_CSS = """
    HeaderBar {
        height: auto;
        max-height: 7;
        background: $panel;
    }
    HeaderBar #header-row {
        height: auto;
        padding: 0 1;
    }
    HeaderBar #header-stats {
        width: auto;
        min-width: 24;
        margin-right: 2;
    }
    HeaderBar #header-hints {
        width: 1fr;
    }
    HeaderBar #header-burndown-box {
        width: 30;
        height: 4;
    }
    HeaderBar #header-burndown {
        height: 3;
    }
    HeaderBar #header-message {
        height: 1;
        padding: 0 1;
        color: $warning;
    }
    """

    def compose(self) -> ComposeResult:
        with Horizontal(id="header-row"):
            yield Static(id="header-stats")
            yield Static(id="header-hints")
            with Vertical(id="header-burndown-box"):
                yield Static("Burndown", id="header-burndown-label")
                yield Sparkline([], summary_function=max, id="header-burndown")
        yield Static(id="header-message")

    def show(self, state: HeaderState, hidden: bool = False) -> None:
        if not self.is_mounted:
            return
        self.display = state.visible and not hidden
        self.query_one("#header-stats", Static).update(render_stats(state.stats))
        self.query_one("#header-hints", Static).update(render_hints(state.hints))
        self.query_one("#header-burndown", Sparkline).data = [p.points for p in state.burndown]
        self.query_one("#header-message", Static).update(state.message)
