"""Rich renderables for tickets on the board."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tiki.task import Ticket, status_display, type_display

SELECTED_STYLE = "bold reverse"
EXPANDED_HEIGHT = 5
COMPACT_HEIGHT = 1

_PRIORITY_MARKS = {1: "▲▲", 2: "▲", 3: "", 4: "▼", 5: "▼▼"}


def box_height(compact: bool) -> int:
    return COMPACT_HEIGHT if compact else EXPANDED_HEIGHT


def compact_line(ticket: Ticket, selected: bool = False) -> Text:
    line = Text(no_wrap=True, overflow="ellipsis")
    line.append(type_display(ticket.type).split(" ")[-1] + " ")
    line.append(ticket.id, style="dim")
    line.append(" ")
    line.append(ticket.title)
    if selected:
        line.stylize(SELECTED_STYLE)
    return line


def ticket_panel(ticket: Ticket, selected: bool = False) -> Panel:
    """Three-line card: title, id and type, then points, priority, assignee and tags."""
    title = Text(ticket.title or "(untitled)", style="bold", no_wrap=True, overflow="ellipsis")
    meta = Text(no_wrap=True, overflow="ellipsis")
    meta.append(ticket.id, style="dim")
    meta.append("  " + type_display(ticket.type))
    mark = _PRIORITY_MARKS.get(ticket.priority, "")
    if mark:
        meta.append(" " + mark, style="red" if ticket.priority < 3 else "blue")
    extra = Text(no_wrap=True, overflow="ellipsis")
    if ticket.points:
        extra.append(f"{ticket.points}pt ", style="cyan")
    if ticket.assignee:
        extra.append(f"@{ticket.assignee} ", style="green")
    if ticket.tags:
        extra.append(" ".join(f"#{t}" for t in ticket.tags), style="magenta")
    return Panel(
        Group(title, meta, extra),
        border_style="yellow" if selected else "grey50",
        style="reverse" if selected else "",
        height=EXPANDED_HEIGHT,
        padding=(0, 1),
    )


def render_ticket(ticket: Ticket, compact: bool, selected: bool) -> RenderableType:
    return compact_line(ticket, selected) if compact else ticket_panel(ticket, selected)


def render_lane(
    tickets: list[Ticket], columns: int, compact: bool, selected: int | None, first_row: int, rows: int
) -> RenderableType:
    """Visible slice of a lane laid out row-major in ``columns`` columns."""
    if not tickets:
        return Text("(empty)", style="dim italic")
    columns = max(columns, 1)
    grid = Table.grid(expand=True, padding=(0, 1))
    for _ in range(columns):
        grid.add_column(ratio=1)
    start = first_row * columns
    stop = len(tickets) if rows <= 0 else min(len(tickets), start + rows * columns)
    for row_start in range(start, stop, columns):
        cells = []
        for index in range(row_start, min(row_start + columns, stop)):
            cells.append(render_ticket(tickets[index], compact, index == selected))
        cells.extend([""] * (columns - len(cells)))
        grid.add_row(*cells)
    return grid


def status_line(ticket: Ticket) -> Text:
    return Text(f"{status_display(ticket.status)}  {type_display(ticket.type)}")
