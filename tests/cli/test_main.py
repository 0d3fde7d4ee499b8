"""Tests for argument dispatch in the tiki entry point."""

import sys

import pytest

import tiki.__main__ as entry
from tiki.cli import build_parser, build_tui_parser


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["tiki", *argv])
    with pytest.raises(SystemExit) as exc:
        entry.main()
    return exc.value.code


def test_version(monkeypatch, capsys):
    assert _run(monkeypatch, "--version") == 0
    assert capsys.readouterr().out.startswith("tiki ")


def test_plugin_with_target_is_rejected(monkeypatch, capsys):
    assert _run(monkeypatch, "--plugin", "Kanban", "notes.md") == 2
    assert "--plugin" in capsys.readouterr().err


def test_noun_dispatches_to_handler(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("TIKI_CONFIG_DIR", str(tmp_path / "user"))
    assert _run(monkeypatch, "sysinfo", "--project", str(tmp_path), "--json") == 0
    assert '"initialized": false' in capsys.readouterr().out


def test_board_arguments_reach_run_ui(monkeypatch):
    seen = []

    def fake_run_ui(args):
        seen.append(args)
        return 0

    monkeypatch.setattr(entry, "run_ui", fake_run_ui)
    assert _run(monkeypatch, "--plugin", "Backlog", "--log-level", "debug") == 0
    assert seen[0].plugin == "Backlog"
    assert seen[0].log_level == "debug"
    assert seen[0].target is None


def test_parsers():
    args = build_parser().parse_args(["init", "--project", "/tmp/x"])
    assert args.func.__name__ == "init_command"
    assert args.project == "/tmp/x"

    args = build_tui_parser().parse_args(["README.md"])
    assert args.target == "README.md"
    assert args.plugin is None
