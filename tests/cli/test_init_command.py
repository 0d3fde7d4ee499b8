"""Tests for 'tiki init' command."""

import json
from argparse import Namespace

from tiki.cli.init import init_command
from tiki.git import is_git_repo


def test_init_creates_project(paths, capsys):
    args = Namespace(project=str(paths.project_root), json=False)
    assert init_command(args) == 0

    out = capsys.readouterr().out
    assert "Initialized tiki project" in out
    assert "Initialized git repository" in out
    assert ".doc/doki/index.md" in out
    assert paths.is_initialized()
    assert is_git_repo(paths.project_root)


def test_init_json(paths, capsys):
    args = Namespace(project=str(paths.project_root), json=True)
    assert init_command(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["created"] is True
    assert data["git_initialized"] is True
    assert data["project"] == str(paths.project_root)
    assert ".doc/doki/tickets.md" in data["files"]
    assert len(data["files"]) == 3


def test_init_idempotent(paths, capsys):
    args = Namespace(project=str(paths.project_root), json=False)
    init_command(args)
    capsys.readouterr()

    assert init_command(args) == 0
    assert "already initialized" in capsys.readouterr().out


def test_init_idempotent_json(paths, capsys):
    args = Namespace(project=str(paths.project_root), json=True)
    init_command(args)
    capsys.readouterr()

    init_command(args)
    data = json.loads(capsys.readouterr().out)
    assert data["created"] is False
    assert data["files"] == []
