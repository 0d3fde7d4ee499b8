"""Tests for project initialization."""

from git import Repo

from tiki.parser import parse_ticket
from tiki.project import init_project
from tiki.task import id_from_path


def test_init_creates_repo_and_starter_files(paths):
    result = init_project(paths)

    assert result.created
    assert result.git_initialized
    assert paths.task_dir.is_dir()
    assert (paths.doki_dir / "index.md").exists()
    assert (paths.doki_dir / "tickets.md").exists()

    tickets = list(paths.task_dir.glob("*.md"))
    assert len(tickets) == 1
    sample = parse_ticket(id_from_path(tickets[0]), tickets[0].read_text(), 10)
    assert sample.status == "in_progress"
    assert sample.tags == ["welcome"]
    assert sample.points == 1


def test_init_stages_files(paths):
    init_project(paths)
    repo = Repo(paths.project_root)
    staged = {entry[0] for entry in repo.index.entries}
    assert ".doc/doki/index.md" in staged
    assert any(p.startswith(".doc/tiki/") for p in staged)


def test_init_is_idempotent(paths):
    first = init_project(paths)
    index = paths.doki_dir / "index.md"
    index.write_text("# Mine\n")

    second = init_project(paths)

    assert first.created
    assert not second.created
    assert second.files == []
    assert index.read_text() == "# Mine\n"


def test_init_inside_existing_repo(git_project, paths):
    result = init_project(paths)
    assert result.created
    assert not result.git_initialized
