"""Parse and serialize ticket markdown files with front-matter."""

import logging
import re

import yaml

from tiki.errors import InvalidFrontmatter
from tiki.task import (
    Ticket,
    normalize_id,
    normalize_points,
    normalize_priority,
    normalize_status,
    normalize_tags,
    normalize_type,
)

logger = logging.getLogger(__name__)

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)

FIELD_ORDER = ("title", "type", "status", "tags", "assignee", "priority", "points")


def split_front_matter(text: str) -> tuple[dict, str]:
    """Split text into (meta, body).

    Raises InvalidFrontmatter when the fences are missing, the YAML is
    malformed, or the YAML is not a mapping.
    """
    match = _FRONT_MATTER.match(text)
    if not match:
        raise InvalidFrontmatter("missing front-matter delimiters")
    try:
        meta = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise InvalidFrontmatter(f"malformed front-matter: {e}") from e
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise InvalidFrontmatter("front-matter is not a mapping")
    return meta, text[match.end() :]


def parse_ticket(ticket_id: str, text: str, max_points: int) -> Ticket:
    """Build a normalized Ticket from file text.

    The identifier always comes from the filename; an ``id`` key in the
    front-matter is ignored.
    """
    ticket_id = normalize_id(ticket_id)
    meta, body = split_front_matter(text)

    embedded = meta.get("id")
    if embedded is not None and normalize_id(str(embedded)) != ticket_id:
        logger.warning("ignoring front-matter id %s in %s", embedded, ticket_id)

    title = meta.get("title")
    assignee = meta.get("assignee")
    return Ticket(
        id=ticket_id,
        title="" if title is None else str(title),
        description=body.strip("\n"),
        type=normalize_type(meta.get("type")),
        status=normalize_status(meta.get("status")),
        tags=normalize_tags(meta.get("tags")),
        assignee="" if assignee is None else str(assignee),
        priority=normalize_priority(meta.get("priority")),
        points=normalize_points(meta.get("points"), max_points),
    )


def serialize_ticket(ticket: Ticket) -> str:
    """Render a ticket as front-matter plus body, keys in fixed order."""
    meta = {
        "title": ticket.title,
        "type": ticket.type,
        "status": ticket.status,
        "tags": sorted(set(ticket.tags)),
        "assignee": ticket.assignee,
        "priority": ticket.priority,
        "points": ticket.points,
    }
    front = yaml.safe_dump(meta, default_flow_style=False, sort_keys=False, allow_unicode=True)
    body = ticket.description.strip("\n")
    return f"---\n{front}---\n{body}\n"
