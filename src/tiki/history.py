"""Status history and burndown series recovered from version control."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from tiki.errors import Cancelled, InvalidFrontmatter, VcsUnavailable
from tiki.git import VersionControl
from tiki.model.layout import BurndownPoint
from tiki.parser import split_front_matter
from tiki.task import ACTIVE_STATUSES, BACKLOG, id_from_path, normalize_status

logger = logging.getLogger(__name__)

WINDOW_DAYS = 14
HALF_DAYS = WINDOW_DAYS * 2
PERIOD = timedelta(hours=12)


@dataclass(frozen=True)
class StatusChange:
    ticket_id: str
    from_status: str
    to_status: str
    when: datetime
    commit: str


def _day_start_utc(when: datetime) -> datetime:
    when = when.astimezone(timezone.utc)
    return datetime(when.year, when.month, when.day, tzinfo=timezone.utc)


def status_from_content(content: str) -> str:
    """Status recorded in one file version; backlog when missing or unreadable."""
    try:
        meta, _ = split_front_matter(content)
    except InvalidFrontmatter as e:
        logger.debug("unreadable historical version: %s", e)
        return BACKLOG
    return normalize_status(meta.get("status"))


def is_active(status: str) -> bool:
    return status in ACTIVE_STATUSES


class TaskHistory:
    """Per-ticket status transitions and the active-ticket count over a trailing window.

    The window starts at UTC midnight ``WINDOW_DAYS - 1`` days ago. A
    ticket counts toward the baseline when its last version before the
    window is active; every later change crossing the active boundary
    becomes a +1 or -1 delta.
    """

    def __init__(self, vcs: VersionControl, task_dir: str | Path, now: Callable[[], datetime] | None = None):
        self.vcs = vcs
        self.task_dir = Path(task_dir)
        self.now = now or (lambda: datetime.now(timezone.utc))
        self.window_start: datetime | None = None
        self.transitions: dict[str, list[StatusChange]] = {}
        self.base_active = 0
        self._deltas: list[tuple[datetime, int]] = []

    def build(self) -> None:
        """Scan the ticket directory history. Raises VcsUnavailable."""
        self.window_start = _day_start_utc(self.now() - timedelta(days=WINDOW_DAYS - 1))
        self.transitions = {}
        self.base_active = 0
        self._deltas = []

        versions = self.vcs.file_versions_since(self.task_dir, self.window_start, include_prior=True)
        for path, file_versions in versions.items():
            if file_versions:
                self._process_file(id_from_path(path), file_versions)
        self._deltas.sort(key=lambda d: d[0])

    def _process_file(self, ticket_id: str, versions) -> None:
        statuses = [(v.when, status_from_content(v.content), v.commit) for v in versions]

        events: list[tuple[datetime, str]] = []
        baseline = None
        for when, status, _ in statuses:
            if when < self.window_start:
                baseline = status
        last = None
        if baseline is not None:
            events.append((self.window_start, baseline))
            last = baseline

        for when, status, commit in statuses:
            if when < self.window_start:
                continue
            if last is None:
                events.append((when, status))
                last = status
                continue
            if status == last:
                continue
            self.transitions.setdefault(ticket_id, []).append(StatusChange(ticket_id, last, status, when, commit))
            events.append((when, status))
            last = status

        if events:
            self._record(events)

    def _record(self, events: list[tuple[datetime, str]]) -> None:
        events.sort(key=lambda e: e[0])
        first_when, last = events[0]
        if is_active(last):
            if first_when == self.window_start:
                self.base_active += 1
            else:
                self._deltas.append((first_when, 1))
        for when, status in events[1:]:
            if is_active(last) != is_active(status):
                self._deltas.append((when, 1 if is_active(status) else -1))
            last = status

    def burndown(self) -> list[BurndownPoint]:
        """Active count sampled at each half-day boundary of the window."""
        if self.window_start is None:
            return []
        points = []
        current = self.base_active
        i = 0
        start = self.window_start
        for _ in range(HALF_DAYS):
            end = start + PERIOD
            while i < len(self._deltas) and self._deltas[i][0] <= end:
                current += self._deltas[i][1]
                i += 1
            points.append(BurndownPoint(start, current))
            start = end
        return points


class HistoryJob:
    """One background history build that posts its burndown through ``post``.

    ``post`` is expected to hand the result to the UI thread. Cancellation
    is checked before the scan and again before posting; a cancelled job
    raises Cancelled and never posts.
    """

    def __init__(self, history: TaskHistory, post: Callable[[list[BurndownPoint]], None]):
        self.history = history
        self.post = post
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _checkpoint(self, stage: str) -> None:
        if self._cancelled.is_set():
            raise Cancelled(f"history job cancelled {stage}")

    def run(self) -> list[BurndownPoint]:
        self._checkpoint("before scan")
        logger.info("building burndown history")
        try:
            self.history.build()
            points = self.history.burndown()
        except VcsUnavailable as e:
            logger.warning("skipping burndown: %s", e)
            points = []
        except Exception:
            logger.exception("failed to build ticket history")
            points = []
        self._checkpoint("before posting")
        self.post(points)
        return points
