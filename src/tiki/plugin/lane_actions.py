"""Actions applied to a ticket by lane moves and plugin shortcuts.

Syntax is a comma-separated list of assignments or one keyword::

    status=done, tags+=[moved, shipped]
    tags-=[moved]
    priority=1
    delete | open | edit | new
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tiki.errors import InvalidWorkflow
from tiki.task import MAX_PRIORITY, MIN_PRIORITY, TYPES, Ticket, parse_status


class Operation:
    """One step of an action."""

    def apply(self, ticket: Ticket) -> None:
        """Mutate ticket in place. Navigation-style operations do nothing here."""


@dataclass(frozen=True)
class SetStatus(Operation):
    status: str

    def apply(self, ticket):
        ticket.status = self.status


@dataclass(frozen=True)
class SetType(Operation):
    type: str

    def apply(self, ticket):
        ticket.type = self.type


@dataclass(frozen=True)
class AddTag(Operation):
    tag: str

    def apply(self, ticket):
        if self.tag not in ticket.tags:
            ticket.tags = sorted([*ticket.tags, self.tag])


@dataclass(frozen=True)
class RemoveTag(Operation):
    tag: str

    def apply(self, ticket):
        ticket.tags = [t for t in ticket.tags if t != self.tag]


@dataclass(frozen=True)
class SetPriority(Operation):
    priority: int

    def apply(self, ticket):
        ticket.priority = self.priority


@dataclass(frozen=True)
class SetPoints(Operation):
    points: int

    def apply(self, ticket):
        ticket.points = self.points


@dataclass(frozen=True)
class SetAssignee(Operation):
    assignee: str

    def apply(self, ticket):
        ticket.assignee = self.assignee


@dataclass(frozen=True)
class Delete(Operation):
    pass


@dataclass(frozen=True)
class OpenDetail(Operation):
    pass


@dataclass(frozen=True)
class OpenEdit(Operation):
    pass


@dataclass(frozen=True)
class NewTicket(Operation):
    pass


_KEYWORDS = {
    "delete": Delete,
    "open": OpenDetail,
    "edit": OpenEdit,
    "new": NewTicket,
}

_COMMANDS = (Delete, OpenDetail, OpenEdit, NewTicket)

_ASSIGNMENT = re.compile(r"^\s*([a-z_]+)\s*(\+=|-=|=)\s*(.*?)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class LaneAction:
    """Parsed action: an ordered tuple of operations."""

    operations: tuple[Operation, ...]
    source: str = ""

    @property
    def field_operations(self) -> tuple[Operation, ...]:
        return tuple(op for op in self.operations if not isinstance(op, _COMMANDS))

    @property
    def command(self) -> Operation | None:
        """The keyword operation (delete/open/edit/new), if any."""
        for op in self.operations:
            if isinstance(op, _COMMANDS):
                return op
        return None

    def apply(self, ticket: Ticket) -> Ticket:
        """Return a modified copy of ticket."""
        updated = ticket.clone()
        for op in self.field_operations:
            op.apply(updated)
        return updated


def _split_top_level(source: str) -> list[str]:
    parts, depth, current = [], 0, []
    for ch in source:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _list_values(raw: str) -> list[str]:
    raw = raw.strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1]
    values = [v.strip().strip("'\"") for v in raw.split(",")]
    return [v for v in values if v]


def _int_value(field: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidWorkflow(f"{field} needs a number, got {raw!r}", "action") from None


def _parse_part(part: str) -> list[Operation]:
    if part.lower() in _KEYWORDS:
        return [_KEYWORDS[part.lower()]()]
    match = _ASSIGNMENT.match(part)
    if not match:
        raise InvalidWorkflow(f"unknown action {part!r}", "action")
    field, op, raw = match.group(1).lower(), match.group(2), match.group(3).strip("'\"")

    if field in ("tag", "tags") and op in ("+=", "-="):
        values = _list_values(raw)
        if not values:
            raise InvalidWorkflow(f"empty tag list in {part!r}", "action")
        cls = AddTag if op == "+=" else RemoveTag
        return [cls(v) for v in values]
    if op != "=":
        raise InvalidWorkflow(f"{field} does not support {op}", "action")

    match field:
        case "status":
            status = parse_status(raw)
            if status is None:
                raise InvalidWorkflow(f"unknown status {raw!r}", "action")
            return [SetStatus(status)]
        case "type":
            if raw.lower() not in TYPES:
                raise InvalidWorkflow(f"unknown type {raw!r}", "action")
            return [SetType(raw.lower())]
        case "priority":
            value = _int_value(field, raw)
            if not MIN_PRIORITY <= value <= MAX_PRIORITY:
                raise InvalidWorkflow(f"priority {value} out of range", "action")
            return [SetPriority(value)]
        case "points":
            value = _int_value(field, raw)
            if value < 0:
                raise InvalidWorkflow(f"points {value} out of range", "action")
            return [SetPoints(value)]
        case "assignee":
            return [SetAssignee(raw)]
    raise InvalidWorkflow(f"unknown action field {field!r}", "action")


def parse_action(source: str | None) -> LaneAction | None:
    """Compile an action string; None or blank gives None."""
    if source is None or not str(source).strip():
        return None
    operations: list[Operation] = []
    for part in _split_top_level(str(source)):
        operations.extend(_parse_part(part))
    commands = [op for op in operations if isinstance(op, _COMMANDS)]
    if commands and len(operations) > 1:
        raise InvalidWorkflow(f"{source!r} mixes a command with other actions", "action")
    return LaneAction(tuple(operations), str(source))
