"""File-backed ticket store with optimistic concurrency."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from tiki.errors import Conflict, InvalidFrontmatter, IOFailure, NotFound, VcsUnavailable
from tiki.git import NullVcs, VersionControl
from tiki.listeners import ListenerRegistry
from tiki.parser import parse_ticket, serialize_ticket
from tiki.rwlock import ReadWriteLock
from tiki.task import (
    Comment,
    Ticket,
    default_points,
    filename_for,
    generate_id,
    id_from_path,
    normalize_id,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Predicate = Callable[[Ticket], bool]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _mtime_datetime(mtime: float) -> datetime:
    return datetime.fromtimestamp(mtime, tz=timezone.utc)


@dataclass(frozen=True)
class SearchResult:
    ticket: Ticket
    score: float = 1.0


def sort_by_priority_title(tickets: list[Ticket]) -> list[Ticket]:
    return sorted(tickets, key=lambda t: (t.priority, t.title.lower(), t.id))


class TikiStore:
    """Owns every Ticket loaded from one directory of markdown files.

    Mutations hold the write lock for the in-memory map and the file
    write, then release it before listeners run.
    """

    def __init__(
        self,
        directory: str | Path,
        vcs: VersionControl | None = None,
        max_points: int = 10,
        template_path: str | Path | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.directory = Path(directory)
        self.vcs = vcs if vcs is not None else NullVcs()
        self.max_points = max_points
        self.template_path = Path(template_path) if template_path else None
        self.clock = clock
        self._tickets: dict[str, Ticket] = {}
        self._lock = ReadWriteLock()
        self._listeners = ListenerRegistry()

    # --- Listeners ---

    def add_listener(self, listener: Listener) -> int:
        """Register a change listener. Returns its id (never 0)."""
        return self._listeners.add(listener)

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.remove(listener_id)

    def _notify(self) -> None:
        self._listeners.notify()

    # --- Paths ---

    def path_for(self, ticket_id: str) -> Path:
        return self.directory / filename_for(ticket_id)

    def _current_user(self) -> str:
        try:
            name, _email = self.vcs.current_user()
        except VcsUnavailable:
            return ""
        return name

    # --- Loading ---

    def _read_file(self, path: Path) -> Ticket:
        try:
            text = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except OSError as e:
            raise IOFailure(f"cannot read {path}: {e}") from e
        ticket = parse_ticket(id_from_path(path), text, self.max_points)
        ticket.loaded_mtime = mtime
        ticket.updated_at = _mtime_datetime(mtime)
        return ticket

    def _enrich(self, tickets: dict[str, Ticket], paths: dict[str, Path]) -> None:
        """Fill created/updated times from version control, falling back to mtime."""
        try:
            times = self.vcs.file_times(self.directory)
        except VcsUnavailable as e:
            logger.debug("no commit times for %s: %s", self.directory, e)
            times = {}
        fallback_user = self._current_user()

        for ticket_id, ticket in tickets.items():
            info = times.get(str(paths[ticket_id].resolve())) or times.get(str(paths[ticket_id]))
            if info is None:
                ticket.created_at = ticket.updated_at
                ticket.created_by = fallback_user
                continue
            ticket.created_at = info.created_at
            ticket.created_by = info.created_by
            if ticket.updated_at is None or info.updated_at > ticket.updated_at:
                ticket.updated_at = info.updated_at

    def load(self) -> None:
        """Scan the directory and replace the in-memory ticket set."""
        tickets: dict[str, Ticket] = {}
        paths: dict[str, Path] = {}
        if self.directory.is_dir():
            for path in sorted(self.directory.glob("*.md")):
                try:
                    ticket = self._read_file(path)
                except (InvalidFrontmatter, IOFailure) as e:
                    logger.warning("skipping %s: %s", path.name, e)
                    continue
                if ticket.id in tickets:
                    logger.warning("skipping %s: duplicate id %s", path.name, ticket.id)
                    continue
                tickets[ticket.id] = ticket
                paths[ticket.id] = path
        else:
            logger.warning("ticket directory %s does not exist", self.directory)

        self._enrich(tickets, paths)
        with self._lock.write():
            self._tickets = tickets
        logger.info("loaded %d tickets from %s", len(tickets), self.directory)
        self._notify()

    def reload(self) -> None:
        self.load()

    def _find_file(self, ticket_id: str) -> Path | None:
        """Locate the ticket file, tolerating filename case differences."""
        path = self.path_for(ticket_id)
        if path.exists():
            return path
        wanted = filename_for(ticket_id)
        if self.directory.is_dir():
            for candidate in self.directory.glob("*.md"):
                if candidate.name.lower() == wanted:
                    return candidate
        return None

    def reload_task(self, ticket_id: str) -> None:
        """Re-read one ticket from disk, dropping it when the file is gone."""
        ticket_id = normalize_id(ticket_id)
        path = self._find_file(ticket_id)
        if path is None:
            with self._lock.write():
                self._tickets.pop(ticket_id, None)
            self._notify()
            return

        ticket = self._read_file(path)
        self._enrich({ticket.id: ticket}, {ticket.id: path})
        with self._lock.write():
            old = self._tickets.get(ticket_id)
            if old is not None:
                ticket.comments = old.comments
            self._tickets[ticket_id] = ticket
        self._notify()

    # --- Queries ---

    def get(self, ticket_id: str) -> Ticket | None:
        with self._lock.read():
            return self._tickets.get(normalize_id(ticket_id))

    def tickets(self) -> list[Ticket]:
        """All tickets ordered by id."""
        with self._lock.read():
            return [self._tickets[k] for k in sorted(self._tickets)]

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tickets)

    def search(self, query: str = "", predicate: Predicate | None = None) -> list[SearchResult]:
        """Case-insensitive substring search over title and description.

        The predicate pre-filters candidates; an empty query returns every
        candidate. Results are ordered by priority then title.
        """
        needle = query.strip().lower()
        with self._lock.read():
            candidates = list(self._tickets.values())
        if predicate is not None:
            candidates = [t for t in candidates if predicate(t)]
        if needle:
            candidates = [t for t in candidates if needle in t.title.lower() or needle in t.description.lower()]
        return [SearchResult(t) for t in sort_by_priority_title(candidates)]

    def all_users(self) -> list[str]:
        """Known assignees plus version-control authors, sorted."""
        with self._lock.read():
            users = {t.assignee for t in self._tickets.values() if t.assignee}
        try:
            users.update(self.vcs.all_authors())
        except VcsUnavailable:
            pass
        user = self._current_user()
        if user:
            users.add(user)
        return sorted(users)

    def stats(self) -> list[tuple[str, str]]:
        """Header statistics as (label, value) pairs."""
        try:
            branch = self.vcs.current_branch()
        except VcsUnavailable:
            branch = "n/a"
        return [
            ("User", self._current_user() or "n/a"),
            ("Branch", branch),
            ("Tickets", str(len(self))),
        ]

    # --- Persistence ---

    def _write(self, ticket: Ticket) -> None:
        """Write one ticket with the optimistic mtime check, then re-stat and stage."""
        path = self.path_for(ticket.id)
        if ticket.loaded_mtime:
            try:
                on_disk = path.stat().st_mtime
            except FileNotFoundError:
                on_disk = None
            except OSError as e:
                raise IOFailure(f"cannot stat {path}: {e}") from e
            if on_disk != ticket.loaded_mtime:
                raise Conflict(ticket.id, path)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(serialize_ticket(ticket), encoding="utf-8")
            mtime = path.stat().st_mtime
        except OSError as e:
            raise IOFailure(f"cannot write {path}: {e}") from e

        ticket.loaded_mtime = mtime
        ticket.updated_at = _mtime_datetime(mtime)
        try:
            self.vcs.add(path)
        except VcsUnavailable as e:
            logger.warning("could not stage %s: %s", path.name, e)

    # --- Mutations ---

    def new_ticket_template(self) -> Ticket:
        """Draft for a new ticket; the id stays empty until create()."""
        ticket = Ticket(id="", points=default_points(self.max_points), created_by=self._current_user())
        if self.template_path is None or not self.template_path.exists():
            return ticket
        try:
            template = parse_ticket("TEMPLATE", self.template_path.read_text(encoding="utf-8"), self.max_points)
        except (OSError, InvalidFrontmatter) as e:
            logger.warning("ignoring ticket template %s: %s", self.template_path, e)
            return ticket
        template.id = ""
        template.created_by = ticket.created_by
        return template

    def create(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket, generating an id when it has none."""
        with self._lock.write():
            if not ticket.id:
                ticket.id = generate_id()
                while self.path_for(ticket.id).exists() or ticket.id in self._tickets:
                    logger.debug("id collision on %s, regenerating", ticket.id)
                    ticket.id = generate_id()
            ticket.id = normalize_id(ticket.id)
            ticket.loaded_mtime = 0.0
            now = self.clock()
            if ticket.created_at is None:
                ticket.created_at = now
            if not ticket.created_by:
                ticket.created_by = self._current_user()

            self._tickets[ticket.id] = ticket
            try:
                self._write(ticket)
            except Exception:
                del self._tickets[ticket.id]
                raise
        logger.info("created %s", ticket.id)
        self._notify()
        return ticket

    def update(self, ticket: Ticket) -> Ticket:
        """Replace a stored ticket with ``ticket`` and persist it."""
        ticket.id = normalize_id(ticket.id)
        with self._lock.write():
            old = self._tickets.get(ticket.id)
            if old is None:
                raise NotFound(ticket.id)
            self._tickets[ticket.id] = ticket
            try:
                self._write(ticket)
            except Exception:
                self._tickets[ticket.id] = old
                raise
        logger.info("updated %s", ticket.id)
        self._notify()
        return ticket

    def update_status(self, ticket_id: str, status: str) -> bool:
        """Set a ticket's status. Returns False when it already had that status."""
        ticket_id = normalize_id(ticket_id)
        with self._lock.write():
            ticket = self._tickets.get(ticket_id)
            if ticket is None:
                raise NotFound(ticket_id)
            if ticket.status == status:
                return False
            updated = ticket.clone()
            updated.status = status
            self._write(updated)
            self._tickets[ticket_id] = updated
        logger.info("%s status %s -> %s", ticket_id, ticket.status, status)
        self._notify()
        return True

    def delete(self, ticket_id: str) -> None:
        """Remove the ticket file (git rm first, then plain unlink) and forget it."""
        ticket_id = normalize_id(ticket_id)
        with self._lock.write():
            if ticket_id not in self._tickets:
                raise NotFound(ticket_id)
            path = self._find_file(ticket_id) or self.path_for(ticket_id)
            try:
                self.vcs.remove(path)
            except VcsUnavailable as e:
                logger.debug("git rm %s failed, removing directly: %s", path.name, e)
                try:
                    os.remove(path)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    raise IOFailure(f"cannot delete {path}: {e}") from e
            del self._tickets[ticket_id]
        logger.info("deleted %s", ticket_id)
        self._notify()

    def add_comment(self, ticket_id: str, comment: Comment) -> None:
        ticket_id = normalize_id(ticket_id)
        with self._lock.write():
            ticket = self._tickets.get(ticket_id)
            if ticket is None:
                raise NotFound(ticket_id)
            ticket.comments.append(comment)
        self._notify()
