"""Ticket entities, enumerations and validation rules."""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

ID_PREFIX = "TIKI-"
ID_SUFFIX_LENGTH = 6
_ID_ALPHABET = string.ascii_lowercase + string.digits

MAX_TITLE_LENGTH = 200
DEFAULT_PRIORITY = 3
MIN_PRIORITY = 1
MAX_PRIORITY = 5

BACKLOG = "backlog"
READY = "ready"
IN_PROGRESS = "in_progress"
REVIEW = "review"
DONE = "done"

STATUSES = (BACKLOG, READY, IN_PROGRESS, REVIEW, DONE)
ACTIVE_STATUSES = frozenset({READY, IN_PROGRESS, REVIEW})

STORY = "story"
BUG = "bug"
SPIKE = "spike"
EPIC = "epic"

TYPES = (STORY, BUG, SPIKE, EPIC)

_STATUS_ALIASES = {
    "backlog": BACKLOG,
    "todo": READY,
    "to do": READY,
    "open": READY,
    "ready": READY,
    "in_progress": IN_PROGRESS,
    "in-progress": IN_PROGRESS,
    "inprogress": IN_PROGRESS,
    "in progress": IN_PROGRESS,
    "review": REVIEW,
    "in_review": REVIEW,
    "in review": REVIEW,
    "done": DONE,
    "closed": DONE,
    "completed": DONE,
}

_STATUS_DISPLAY = {
    BACKLOG: ("Backlog", "📥"),
    READY: ("Ready", "📋"),
    IN_PROGRESS: ("In Progress", "⚙️"),
    REVIEW: ("Review", "👀"),
    DONE: ("Done", "✅"),
}

_TYPE_DISPLAY = {
    STORY: ("Story", "🌀"),
    BUG: ("Bug", "💥"),
    SPIKE: ("Spike", "🔍"),
    EPIC: ("Epic", "🗂️"),
}


def parse_status(value: str) -> str | None:
    """Known status for a name or alias, None when unrecognised."""
    return _STATUS_ALIASES.get(value.strip().lower())


def normalize_status(value) -> str:
    """Map a raw status string onto a known status, defaulting to backlog."""
    if not isinstance(value, str):
        return BACKLOG
    return parse_status(value) or BACKLOG


def normalize_type(value) -> str:
    """Map a raw type string onto a known type, defaulting to story."""
    if not isinstance(value, str):
        return STORY
    value = value.strip().lower()
    return value if value in TYPES else STORY


def status_label(status: str) -> str:
    return _STATUS_DISPLAY.get(status, (status, ""))[0]


def status_display(status: str) -> str:
    label, emoji = _STATUS_DISPLAY.get(status, (status, ""))
    return f"{label} {emoji}".strip()


def type_display(type_: str) -> str:
    label, emoji = _TYPE_DISPLAY.get(type_, (type_, ""))
    return f"{label} {emoji}".strip()


def default_points(max_points: int) -> int:
    return max_points // 2


def normalize_priority(value) -> int:
    """Priorities outside 1..5 (or not integers) become the default."""
    if isinstance(value, bool) or not isinstance(value, int):
        return DEFAULT_PRIORITY
    if MIN_PRIORITY <= value <= MAX_PRIORITY:
        return value
    return DEFAULT_PRIORITY


def normalize_points(value, max_points: int) -> int:
    """Points outside 1..max_points (or not integers) become max_points // 2."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default_points(max_points)
    if 1 <= value <= max_points:
        return value
    return default_points(max_points)


def normalize_tags(value) -> list[str]:
    """Sorted unique tags, or [] when the value is not a list of non-empty strings."""
    if not isinstance(value, list):
        return []
    if not all(isinstance(t, str) and t.strip() for t in value):
        return []
    return sorted({t.strip() for t in value})


# --- Identifiers ---


def normalize_id(ticket_id: str) -> str:
    """Canonical uppercase identifier."""
    return ticket_id.strip().upper()


def filename_for(ticket_id: str) -> str:
    """On-disk filename for an identifier: lowercase stem plus .md."""
    return normalize_id(ticket_id).lower() + ".md"


def id_from_path(path: str | Path) -> str:
    """Identifier derived from a ticket file path."""
    return Path(path).stem.upper()


def generate_id(rng: random.Random | None = None) -> str:
    """Random identifier like TIKI-x7k2p9."""
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return ID_PREFIX + suffix.upper()


# --- Entities ---


@dataclass
class Comment:
    author: str
    body: str
    created_at: datetime


@dataclass
class Ticket:
    """A single ticket backed by one markdown file."""

    id: str
    title: str = ""
    description: str = ""
    type: str = STORY
    status: str = BACKLOG
    tags: list[str] = field(default_factory=list)
    assignee: str = ""
    priority: int = DEFAULT_PRIORITY
    points: int = 0
    loaded_mtime: float = 0.0
    updated_at: datetime | None = None
    created_at: datetime | None = None
    created_by: str = ""
    comments: list[Comment] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return filename_for(self.id)

    def clone(self) -> Ticket:
        """Copy safe to mutate without touching the original."""
        return replace(self, tags=list(self.tags), comments=list(self.comments))


# --- Validation ---


def validate_ticket(ticket: Ticket, max_points: int) -> list[str]:
    """Return human-readable validation errors, empty when the ticket is valid."""
    errors = []
    title = ticket.title.strip()
    if not title:
        errors.append("title is required")
    elif len(title) > MAX_TITLE_LENGTH:
        errors.append(f"title exceeds maximum length of {MAX_TITLE_LENGTH} characters")
    if ticket.status not in STATUSES:
        errors.append(f"invalid status value: {ticket.status}")
    if ticket.type not in TYPES:
        errors.append(f"invalid type value: {ticket.type}")
    if not MIN_PRIORITY <= ticket.priority <= MAX_PRIORITY:
        errors.append(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
    if not 0 <= ticket.points <= max_points:
        errors.append(f"points must be between 0 and {max_points}")
    return errors
