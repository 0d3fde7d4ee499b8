"""Multi-key sort rules for lane contents."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from tiki.errors import InvalidWorkflow
from tiki.task import STATUSES, Ticket

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SORT_FIELDS = {
    "priority": lambda t: t.priority,
    "title": lambda t: t.title.lower(),
    "status": lambda t: STATUSES.index(t.status) if t.status in STATUSES else len(STATUSES),
    "updated": lambda t: t.updated_at or _EPOCH,
    "created": lambda t: t.created_at or _EPOCH,
    "points": lambda t: t.points,
}

_FIELD_ALIASES = {
    "updated_at": "updated",
    "updated-at": "updated",
    "updatedat": "updated",
    "created_at": "created",
    "created-at": "created",
    "createdat": "created",
}


@dataclass(frozen=True)
class SortRule:
    field: str
    descending: bool = False


DEFAULT_SORT = (SortRule("priority"), SortRule("title"))


def parse_sort(specs) -> tuple[SortRule, ...]:
    """Compile ``field[:asc|:desc]`` tokens.

    Accepts a list of tokens or one comma-separated string. Missing or
    empty input gives the default priority-then-title order.
    """
    if specs is None:
        return DEFAULT_SORT
    if isinstance(specs, str):
        specs = [s for s in specs.split(",") if s.strip()]
    if not isinstance(specs, list):
        raise InvalidWorkflow("sort must be a list of field specs", "sort")
    if not specs:
        return DEFAULT_SORT

    rules = []
    for spec in specs:
        name, _, direction = str(spec).strip().partition(":")
        name = name.strip().lower()
        name = _FIELD_ALIASES.get(name, name)
        if name not in SORT_FIELDS:
            raise InvalidWorkflow(f"unknown sort field {name!r}", "sort")
        direction = direction.strip().lower() or "asc"
        if direction not in ("asc", "desc"):
            raise InvalidWorkflow(f"unknown sort direction {direction!r}", "sort")
        rules.append(SortRule(name, direction == "desc"))
    return tuple(rules)


def sort_tickets(tickets: list[Ticket], rules: tuple[SortRule, ...] = DEFAULT_SORT) -> list[Ticket]:
    """Stable multi-key sort; ties fall back to ticket id."""
    result = sorted(tickets, key=lambda t: t.id)
    for rule in reversed(rules):
        result.sort(key=SORT_FIELDS[rule.field], reverse=rule.descending)
    return result
