"""Read-only ticket detail view."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Markdown, Static

from tiki.task import Ticket, status_display, type_display


def _when(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "n/a"


def ticket_fields(ticket: Ticket) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Status", status_display(ticket.status))
    table.add_row("Type", type_display(ticket.type))
    table.add_row("Priority", str(ticket.priority))
    table.add_row("Points", str(ticket.points))
    table.add_row("Assignee", ticket.assignee or "Unassigned")
    if ticket.tags:
        table.add_row("Tags", ", ".join(ticket.tags))
    table.add_row("Created", f"{_when(ticket.created_at)} by {ticket.created_by or 'n/a'}")
    table.add_row("Updated", _when(ticket.updated_at))
    return table


class DetailView(VerticalScroll, can_focus=False):
    """Fields, description and comments of one ticket."""

    DEFAULT_CSS = """
    DetailView {
        height: 1fr;
        padding: 0 1;
    }
    DetailView #detail-title {
        text-style: bold;
        margin-bottom: 1;
    }
    DetailView #detail-fields {
        margin-bottom: 1;
    }
    DetailView #detail-comments {
        color: $text-muted;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="detail-title")
        yield Static(id="detail-fields")
        yield Markdown(id="detail-body")
        yield Static(id="detail-comments")

    def show(self, ticket: Ticket | None) -> None:
        if not self.is_mounted:
            return
        if ticket is None:
            self.query_one("#detail-title", Static).update(Text("Ticket not found", style="bold red"))
            self.query_one("#detail-fields", Static).update("")
            self.query_one("#detail-body", Markdown).update("")
            self.query_one("#detail-comments", Static).update("")
            return
        self.query_one("#detail-title", Static).update(Text(f"{ticket.id}  {ticket.title}"))
        self.query_one("#detail-fields", Static).update(ticket_fields(ticket))
        self.query_one("#detail-body", Markdown).update(ticket.description)
        comments = Text()
        for comment in ticket.comments:
            comments.append(f"{comment.author} ({_when(comment.created_at)}): ", style="bold")
            comments.append(comment.body + "\n")
        self.query_one("#detail-comments", Static).update(comments)
