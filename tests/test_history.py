"""Tests for status history and the burndown series."""

from datetime import datetime, timedelta, timezone

import pytest

from tiki.errors import Cancelled
from tiki.git import FileVersion
from tiki.history import HALF_DAYS, HistoryJob, TaskHistory, status_from_content

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _version(path, status, days_ago, commit):
    return FileVersion(
        path=str(path),
        commit=commit,
        when=NOW - timedelta(days=days_ago),
        content=f"---\ntitle: x\nstatus: {status}\n---\n",
    )


@pytest.fixture
def history(fake_vcs, task_dir):
    return TaskHistory(fake_vcs, task_dir, now=lambda: NOW)


def test_status_from_content():
    assert status_from_content("---\nstatus: in progress\n---\n") == "in_progress"
    assert status_from_content("not a ticket") == "backlog"


def test_window_starts_at_utc_midnight(history):
    history.build()
    assert history.window_start == datetime(2026, 3, 2, tzinfo=timezone.utc)


def test_empty_history_is_flat(history):
    history.build()
    points = history.burndown()
    assert len(points) == HALF_DAYS
    assert all(p.points == 0 for p in points)
    assert points[1].date - points[0].date == timedelta(hours=12)


def test_ticket_moving_through_active_and_done(history, fake_vcs, task_dir):
    """Backlog before the window, ready 5 days ago, done 2 days ago."""
    path = task_dir / "tiki-aaaaaa.md"
    fake_vcs.versions = {
        str(path): [
            _version(path, "backlog", 20, "c1"),
            _version(path, "ready", 5, "c2"),
            _version(path, "done", 2, "c3"),
        ]
    }
    history.build()

    changes = history.transitions["TIKI-AAAAAA"]
    assert [(c.from_status, c.to_status) for c in changes] == [("backlog", "ready"), ("ready", "done")]
    assert changes[0].commit == "c2"

    assert history.base_active == 0
    points = [p.points for p in history.burndown()]
    assert points == [0] * 16 + [1] * 6 + [0] * 6


def test_active_before_window_counts_in_baseline(history, fake_vcs, task_dir):
    path = task_dir / "tiki-bbbbbb.md"
    fake_vcs.versions = {str(path): [_version(path, "in_progress", 30, "c1")]}
    history.build()

    assert history.base_active == 1
    assert all(p.points == 1 for p in history.burndown())
    assert "TIKI-BBBBBB" not in history.transitions


def test_ticket_created_active_inside_window(history, fake_vcs, task_dir):
    path = task_dir / "tiki-cccccc.md"
    fake_vcs.versions = {str(path): [_version(path, "review", 1, "c1")]}
    history.build()

    points = [p.points for p in history.burndown()]
    assert points[-1] == 1
    assert points[0] == 0
    assert history.transitions == {}


def test_job_posts_points(history):
    posted = []
    job = HistoryJob(history, posted.append)
    points = job.run()
    assert posted == [points]
    assert len(points) == HALF_DAYS


def test_job_without_version_control_posts_nothing_useful(history, fake_vcs):
    fake_vcs.fail = True
    posted = []
    HistoryJob(history, posted.append).run()
    assert posted == [[]]


def test_cancelled_job_never_posts(history):
    posted = []
    job = HistoryJob(history, posted.append)
    job.cancel()
    assert job.cancelled
    with pytest.raises(Cancelled):
        job.run()
    assert posted == []


def test_cancel_during_scan(history, fake_vcs):
    """Cancelling while the scan runs stops the job before it posts."""
    posted = []
    job = HistoryJob(history, posted.append)
    original = fake_vcs.file_versions_since

    def scan_then_cancel(*args, **kwargs):
        job.cancel()
        return original(*args, **kwargs)

    fake_vcs.file_versions_since = scan_then_cancel
    with pytest.raises(Cancelled):
        job.run()
    assert posted == []
