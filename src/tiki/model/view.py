"""View identifiers and per-view navigation parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tiki.task import Ticket

TASK_DETAIL = "task_detail"
TASK_EDIT = "task_edit"
PLUGIN_PREFIX = "plugin:"

EDIT_FIELDS = ("title", "status", "type", "priority", "assignee", "points", "description")


def plugin_view_id(plugin_name: str) -> str:
    return PLUGIN_PREFIX + plugin_name


def is_plugin_view(view_id: str) -> bool:
    return view_id.startswith(PLUGIN_PREFIX)


def plugin_name(view_id: str) -> str:
    return view_id[len(PLUGIN_PREFIX) :] if is_plugin_view(view_id) else ""


@dataclass(frozen=True)
class TaskDetailParams:
    ticket_id: str

    def encode(self) -> dict[str, Any]:
        return {"ticketID": self.ticket_id}

    @classmethod
    def decode(cls, params: dict[str, Any] | None) -> TaskDetailParams:
        params = params or {}
        return cls(ticket_id=str(params.get("ticketID") or ""))


@dataclass(frozen=True)
class TaskEditParams:
    """An edit frame: the ticket, an optional in-progress draft and the focused field.

    A new ticket has an empty ticket_id and carries its draft.
    """

    ticket_id: str = ""
    draft: Ticket | None = None
    focus: str = "title"

    @property
    def is_new(self) -> bool:
        return not self.ticket_id

    def encode(self) -> dict[str, Any]:
        params: dict[str, Any] = {"ticketID": self.ticket_id, "focusField": self.focus}
        if self.draft is not None:
            params["draftTicket"] = self.draft
        return params

    @classmethod
    def decode(cls, params: dict[str, Any] | None) -> TaskEditParams:
        params = params or {}
        focus = str(params.get("focusField") or "title")
        if focus not in EDIT_FIELDS:
            focus = "title"
        draft = params.get("draftTicket")
        return cls(
            ticket_id=str(params.get("ticketID") or ""),
            draft=draft if isinstance(draft, Ticket) else None,
            focus=focus,
        )
