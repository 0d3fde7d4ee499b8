"""Tests for building plugins from embedded and workflow definitions."""

import logging

import pytest

from tiki.errors import InvalidWorkflow
from tiki.keys import RUNE, Mod
from tiki.plugin import COMPACT, DOKI, EXPANDED, TIKI, build_plugin, load_plugins, read_workflow_entries


@pytest.fixture
def workflow(tmp_path):
    """Write a workflow file and return its path."""

    def write(text, name="workflow.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return write


def test_embedded_plugins():
    plugins = load_plugins([])
    names = [p.name for p in plugins]
    assert names == ["Kanban", "Backlog", "Recent", "Roadmap", "Help", "Docs"]

    kanban = plugins[0]
    assert kanban.default
    assert kanban.type == TIKI
    assert [lane.name for lane in kanban.lanes] == ["Backlog", "Ready", "In Progress", "Review", "Done"]
    assert kanban.key_binding == ("f1", "", Mod.NONE)

    help_plugin = plugins[4]
    assert help_plugin.type == DOKI
    assert help_plugin.key_binding == (RUNE, "?", Mod.NONE)


def test_only_one_default():
    assert sum(p.default for p in load_plugins([])) == 1


def test_workflow_adds_and_overrides(workflow):
    path = workflow(
        """\
views:
  - name: Kanban
    view: compact
    default: false
  - name: Mine
    key: Ctrl-M
    default: true
    sort: [updated:desc]
    lanes:
      - name: Assigned
        columns: 2
        filter: me and not status=done
        action: assignee=alice
"""
    )
    plugins = load_plugins([path])
    by_name = {p.name: p for p in plugins}

    assert by_name["Kanban"].view_mode == COMPACT
    assert by_name["Kanban"].source == str(path)
    assert by_name["Kanban"].config_index == 0
    assert not by_name["Kanban"].default

    mine = by_name["Mine"]
    assert mine.default
    assert mine.config_index == 1
    assert mine.key_binding == ("m", "", Mod.CTRL)
    assert mine.lanes[0].columns == 2
    assert mine.lanes[0].filter_source == "me and not status=done"
    assert mine.sort[0].descending


def test_later_files_override_earlier(workflow):
    first = workflow("views:\n  - name: Recent\n    view: compact\n", "first.yaml")
    second = workflow("views:\n  - name: Recent\n    view: expanded\n", "second.yaml")
    recent = next(p for p in load_plugins([first, second]) if p.name == "Recent")
    assert recent.view_mode == EXPANDED
    assert recent.source == str(second)


def test_invalid_filter_drops_only_that_plugin(workflow, caplog):
    path = workflow(
        """\
views:
  - name: Broken
    key: F7
    lanes:
      - name: Nothing
        filter: "status="
  - name: Fine
    key: F8
    lanes:
      - name: All
"""
    )
    with caplog.at_level(logging.WARNING):
        plugins = load_plugins([path])
    names = [p.name for p in plugins]

    assert "Broken" not in names
    assert "Fine" in names
    assert "Kanban" in names
    assert "Broken" in caplog.text


def test_duplicate_activation_key_keeps_later_plugin(workflow):
    path = workflow(
        """\
views:
  - name: Other
    key: F1
    lanes:
      - name: All
"""
    )
    names = [p.name for p in load_plugins([path])]
    assert "Kanban" not in names
    assert "Other" in names


def test_default_falls_back_to_first_plugin(workflow):
    path = workflow("views:\n  - name: Kanban\n    default: false\n")
    plugins = load_plugins([path])
    assert plugins[0].default


def test_unreadable_workflow_is_skipped(workflow):
    path = workflow("views: {not: a list}\n")
    assert len(load_plugins([path])) == len(load_plugins([]))


def test_missing_workflow_file_is_skipped(tmp_path):
    assert len(load_plugins([tmp_path / "absent.yaml"])) == len(load_plugins([]))


def test_read_workflow_entries_errors(workflow):
    with pytest.raises(InvalidWorkflow):
        read_workflow_entries(workflow("- not\n- a mapping\n"))
    assert read_workflow_entries(workflow("")) == []


@pytest.mark.parametrize(
    "entry",
    [
        {"name": ""},
        {"name": "NoLanes"},
        {"name": "BadType", "type": "wiki"},
        {"name": "BadKey", "key": "Hyper-Q", "lanes": [{"name": "a"}]},
        {"name": "BadView", "view": "tiny", "lanes": [{"name": "a"}]},
        {"name": "BadSort", "sort": ["colour"], "lanes": [{"name": "a"}]},
        {"name": "Unnamed lane", "lanes": [{"filter": "status=done"}]},
        {"name": "TooMany", "lanes": [{"name": str(i)} for i in range(11)]},
        {"name": "Doc", "type": "doki", "fetcher": "file"},
        {"name": "Doc", "type": "doki", "fetcher": "ftp", "url": "x.md"},
        {"name": "BadAction", "lanes": [{"name": "a", "action": "status=limbo"}]},
    ],
)
def test_build_plugin_rejects(entry):
    with pytest.raises(InvalidWorkflow):
        build_plugin(entry)


def test_build_plugin_shortcuts():
    plugin = build_plugin(
        {
            "name": "Triage",
            "lanes": [{"name": "New", "filter": "status=backlog"}],
            "actions": [
                {"key": "b", "label": "To ready", "action": "status=ready"},
                {"key": "Ctrl-D", "action": "delete"},
            ],
        }
    )
    assert [a.label for a in plugin.actions] == ["To ready", "delete"]
    assert plugin.actions[0].key_display == "b"
    assert plugin.actions[1].key_display == "Ctrl-D"


def test_build_doki_plugin():
    plugin = build_plugin({"name": "Notes", "type": "doki", "fetcher": "internal", "text": "# Hi"})
    assert plugin.fetcher == "internal"
    assert plugin.text == "# Hi"
    assert plugin.lanes == ()
