"""Ticket edit form rendered from the current edit session."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from tiki.controller.task import EditSession
from tiki.model.view import EDIT_FIELDS
from tiki.task import status_display, type_display

_LABELS = {
    "title": "Title",
    "status": "Status",
    "type": "Type",
    "priority": "Priority",
    "assignee": "Assignee",
    "points": "Points",
    "description": "Description",
}


def _value(session: EditSession, field: str) -> str:
    draft = session.draft
    match field:
        case "status":
            return status_display(draft.status)
        case "type":
            return type_display(draft.type)
    return session.display_value(field)


class EditView(Vertical):
    DEFAULT_CSS = """
    EditView {
        height: 1fr;
        padding: 0 1;
    }
    EditView #edit-heading {
        text-style: bold;
        margin-bottom: 1;
    }
    EditView #edit-error {
        color: $error;
        margin-top: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="edit-heading")
        yield Static(id="edit-fields")
        yield Static(id="edit-error")

    def show(self, session: EditSession | None) -> None:
        if not self.is_mounted or session is None:
            return
        heading = "New ticket" if session.is_new else f"Editing {session.ticket_id}"
        self.query_one("#edit-heading", Static).update(heading)

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold", width=12)
        table.add_column()
        for field in EDIT_FIELDS:
            focused = field == session.focus
            value = Text(_value(session, field))
            if focused:
                value.append("▏")
                value.stylize("reverse")
            label = Text(("› " if focused else "  ") + _LABELS[field])
            table.add_row(label, value)
        self.query_one("#edit-fields", Static).update(table)
        self.query_one("#edit-error", Static).update(session.error)
