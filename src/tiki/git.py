"""Version control collaborator backed by GitPython."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitError

from tiki.errors import VcsUnavailable

logger = logging.getLogger(__name__)

_SEP = "\x1f"


@dataclass(frozen=True)
class FileTimes:
    """Creation and last-change information for one tracked file."""

    created_at: datetime
    created_by: str
    updated_at: datetime


@dataclass(frozen=True)
class FileVersion:
    path: str
    commit: str
    when: datetime
    content: str


class VersionControl(Protocol):
    """Operations the store and history builder need from version control.

    Every method raises VcsUnavailable on failure.
    """

    def current_user(self) -> tuple[str, str]: ...

    def current_branch(self) -> str: ...

    def add(self, path: str | Path) -> None: ...

    def remove(self, path: str | Path) -> None: ...

    def last_commit_time(self, path: str | Path) -> datetime | None: ...

    def authors_since(self, path: str | Path, since: datetime | None = None) -> list[str]: ...

    def file_times(self, directory: str | Path) -> dict[str, FileTimes]: ...

    def file_versions_since(
        self, directory: str | Path, since: datetime, include_prior: bool = True
    ) -> dict[str, list[FileVersion]]: ...

    def all_authors(self) -> list[str]: ...


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    try:
        Repo(path, search_parent_directories=True)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def init_repo(path: str | Path) -> Repo:
    """Initialize a new git repository at path."""
    return Repo.init(path)


@contextmanager
def _vcs_errors(operation: str):
    try:
        yield
    except (GitError, ValueError) as e:
        raise VcsUnavailable(f"git {operation} failed: {e}") from e


class GitVcs:
    """VersionControl implementation over a git working tree."""

    def __init__(self, root: str | Path):
        with _vcs_errors("open"):
            self.repo = Repo(root, search_parent_directories=True)
        self.root = Path(self.repo.working_tree_dir).resolve()

    def _rel(self, path: str | Path) -> str:
        path = Path(path)
        if not path.is_absolute():
            return path.as_posix()
        return path.resolve().relative_to(self.root).as_posix()

    def current_user(self) -> tuple[str, str]:
        with _vcs_errors("config"):
            reader = self.repo.config_reader()
            name = reader.get_value("user", "name", "")
            email = reader.get_value("user", "email", "")
        return str(name), str(email)

    def current_branch(self) -> str:
        with _vcs_errors("branch"):
            try:
                return self.repo.active_branch.name
            except TypeError:
                # detached HEAD
                return self.repo.head.commit.hexsha[:7]

    def add(self, path: str | Path) -> None:
        with _vcs_errors("add"):
            self.repo.index.add([self._rel(path)])

    def remove(self, path: str | Path) -> None:
        with _vcs_errors("rm"):
            self.repo.git.rm("-f", "--", self._rel(path))

    def last_commit_time(self, path: str | Path) -> datetime | None:
        with _vcs_errors("log"):
            commit = next(self.repo.iter_commits(paths=self._rel(path), max_count=1), None)
        return commit.committed_datetime if commit else None

    def authors_since(self, path: str | Path, since: datetime | None = None) -> list[str]:
        kwargs = {"paths": self._rel(path)}
        if since is not None:
            kwargs["since"] = since.isoformat()
        authors: list[str] = []
        with _vcs_errors("log"):
            for commit in self.repo.iter_commits(**kwargs):
                name = commit.author.name
                if name and name not in authors:
                    authors.append(name)
        return authors

    def file_times(self, directory: str | Path) -> dict[str, FileTimes]:
        """Creation and last-commit times for every file under directory, in one git log call."""
        with _vcs_errors("log"):
            if not self.repo.head.is_valid():
                return {}
            output = self.repo.git.log(
                f"--format={_SEP}%aI{_SEP}%an", "--name-only", "--", self._rel(directory)
            )

        newest: dict[str, datetime] = {}
        oldest: dict[str, tuple[datetime, str]] = {}
        when: datetime | None = None
        author = ""
        for line in output.splitlines():
            if line.startswith(_SEP):
                _, stamp, author = line.split(_SEP, 2)
                when = datetime.fromisoformat(stamp)
                continue
            if not line.strip() or when is None:
                continue
            path = str(self.root / line.strip())
            newest.setdefault(path, when)
            # log is newest first, so the last sighting is the commit that added the file
            oldest[path] = (when, author)

        return {
            path: FileTimes(created_at=oldest[path][0], created_by=oldest[path][1], updated_at=updated)
            for path, updated in newest.items()
        }

    def file_versions_since(
        self, directory: str | Path, since: datetime, include_prior: bool = True
    ) -> dict[str, list[FileVersion]]:
        """Every distinct version of the *.md files under directory committed since ``since``.

        With include_prior, the last version before ``since`` is included too so
        callers can recover the state at the start of the window. Versions are
        ordered oldest first.
        """
        rel = self._rel(directory)
        with _vcs_errors("log"):
            if not self.repo.head.is_valid():
                return {}
            commits = list(self.repo.iter_commits(paths=rel, since=since.isoformat()))
            if include_prior:
                prior = next(self.repo.iter_commits(paths=rel, until=since.isoformat(), max_count=1), None)
                if prior is not None and prior not in commits:
                    commits.append(prior)
            commits.sort(key=lambda c: c.committed_datetime)

            result: dict[str, list[FileVersion]] = {}
            last_blob: dict[str, str] = {}
            for commit in commits:
                try:
                    tree = commit.tree / rel
                except KeyError:
                    continue
                for blob in tree.blobs:
                    if not blob.path.endswith(".md"):
                        continue
                    path = str(self.root / blob.path)
                    if last_blob.get(path) == blob.hexsha:
                        continue
                    last_blob[path] = blob.hexsha
                    content = blob.data_stream.read().decode("utf-8", errors="replace")
                    result.setdefault(path, []).append(
                        FileVersion(path=path, commit=commit.hexsha, when=commit.committed_datetime, content=content)
                    )
        return result

    def all_authors(self) -> list[str]:
        with _vcs_errors("log"):
            if not self.repo.head.is_valid():
                return []
            names = {commit.author.name for commit in self.repo.iter_commits()}
        return sorted(n for n in names if n)


class NullVcs:
    """Stand-in used when the project is not under version control."""

    def _unavailable(self, *args, **kwargs):
        raise VcsUnavailable("not a git repository")

    current_user = _unavailable
    current_branch = _unavailable
    add = _unavailable
    remove = _unavailable
    last_commit_time = _unavailable
    authors_since = _unavailable
    file_times = _unavailable
    file_versions_since = _unavailable
    all_authors = _unavailable


def open_vcs(root: str | Path) -> VersionControl:
    """GitVcs for a repository, NullVcs otherwise."""
    try:
        return GitVcs(root)
    except VcsUnavailable as e:
        logger.warning("version control unavailable for %s: %s", root, e)
        return NullVcs()
