"""Shared fixtures: an in-memory version control double, stores and contexts."""

from pathlib import Path

import pytest
from git import Repo

from tiki.config import Config, Paths
from tiki.context import AppContext
from tiki.errors import VcsUnavailable
from tiki.parser import serialize_ticket
from tiki.plugin import load_plugins
from tiki.store import TikiStore
from tiki.task import Ticket, filename_for


class FakeVcs:
    """VersionControl kept in memory. Records staged and removed paths.

    Set ``fail`` to make every call raise VcsUnavailable.
    """

    def __init__(self, user=("Alice", "alice@example.com"), branch="main"):
        self.user = user
        self.branch = branch
        self.added: list[Path] = []
        self.removed: list[Path] = []
        self.versions: dict = {}
        self.times: dict = {}
        self.authors: list[str] = []
        self.fail = False

    def _check(self, operation):
        if self.fail:
            raise VcsUnavailable(f"git {operation} failed")

    def current_user(self):
        self._check("config")
        return self.user

    def current_branch(self):
        self._check("branch")
        return self.branch

    def add(self, path):
        self._check("add")
        self.added.append(Path(path))

    def remove(self, path):
        self._check("rm")
        self.removed.append(Path(path))
        Path(path).unlink(missing_ok=True)

    def last_commit_time(self, path):
        self._check("log")
        times = self.times.get(str(path))
        return times.updated_at if times else None

    def authors_since(self, path, since=None):
        self._check("log")
        return list(self.authors)

    def file_times(self, directory):
        self._check("log")
        return dict(self.times)

    def file_versions_since(self, directory, since, include_prior=True):
        self._check("log")
        return {path: list(versions) for path, versions in self.versions.items()}

    def all_authors(self):
        self._check("log")
        return list(self.authors)


@pytest.fixture
def fake_vcs():
    return FakeVcs()


@pytest.fixture
def task_dir(tmp_path):
    """Empty .doc/tiki directory under tmp_path."""
    directory = tmp_path / ".doc" / "tiki"
    directory.mkdir(parents=True)
    return directory


@pytest.fixture
def write_ticket(task_dir):
    """Write a ticket file directly, bypassing the store."""

    def write(ticket_id, title="Ticket", **fields):
        fields.setdefault("points", 1)
        ticket = Ticket(id=ticket_id, title=title, **fields)
        path = task_dir / filename_for(ticket_id)
        path.write_text(serialize_ticket(ticket), encoding="utf-8")
        return path

    return write


@pytest.fixture
def store(task_dir, fake_vcs):
    return TikiStore(task_dir, vcs=fake_vcs, max_points=10)


@pytest.fixture
def paths(tmp_path, monkeypatch):
    """Project paths rooted at tmp_path with user config and cache kept inside it."""
    monkeypatch.chdir(tmp_path)
    environ = {
        "TIKI_CONFIG_DIR": str(tmp_path / "user"),
        "XDG_CACHE_HOME": str(tmp_path / "cache"),
    }
    return Paths.for_project(tmp_path, environ)


@pytest.fixture
def ctx(paths, store, fake_vcs):
    """Context over the built-in plugins and the fake version control."""
    return AppContext(paths=paths, config=Config(), vcs=fake_vcs, store=store, plugins=load_plugins([]))


@pytest.fixture
def git_project(tmp_path):
    """A git repo with a configured user and one initial commit."""
    repo = Repo.init(tmp_path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path
