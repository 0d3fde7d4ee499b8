"""Tests for action registries and their composition."""

from tiki.controller import actions as A
from tiki.keys import KeyEvent, Mod
from tiki.plugin import load_plugins


def test_match_by_rune_and_key():
    registry = A.global_actions()
    assert registry.match(KeyEvent.char("q")).id == A.QUIT
    assert registry.match(KeyEvent("escape")).id == A.BACK
    assert registry.match(KeyEvent("f10")).id == A.TOGGLE_HEADER
    assert registry.match(KeyEvent.char("x")) is None


def test_modifiers_must_match_exactly():
    registry = A.plugin_view_actions()
    assert registry.match(KeyEvent("right")).id == A.NAV_RIGHT
    assert registry.match(KeyEvent("right", "", Mod.SHIFT)).id == A.MOVE_RIGHT
    assert registry.match(KeyEvent("right", "", Mod.CTRL)) is None


def test_register_same_binding_replaces_in_place():
    registry = A.ActionRegistry([A.rune_action("one", "a"), A.rune_action("two", "b")])
    registry.register(A.rune_action("three", "a"))
    assert [a.id for a in registry.actions()] == ["three", "two"]
    assert registry.match(KeyEvent.char("a")).id == "three"


def test_compose_rightmost_wins():
    left = A.ActionRegistry([A.rune_action("left_q", "q"), A.rune_action("left_r", "r")])
    right = A.ActionRegistry([A.rune_action("right_q", "q")])
    merged = A.compose(left, right)
    assert merged.match(KeyEvent.char("q")).id == "right_q"
    assert merged.match(KeyEvent.char("r")).id == "left_r"
    assert len(left) == 2
    assert left.match(KeyEvent.char("q")).id == "left_q"


def test_header_actions_hide_navigation():
    ids = [a.id for a in A.plugin_view_actions().header_actions()]
    assert A.NAV_UP not in ids
    assert A.OPEN_TASK in ids


def test_plugin_activation_actions():
    registry = A.plugin_activation_actions(load_plugins([]))
    action = registry.match(KeyEvent("f1"))
    assert action.id == "plugin:Kanban"
    assert A.plugin_name_from_action(action.id) == "Kanban"
    assert registry.match(KeyEvent.char("?")).id == "plugin:Help"
    assert A.plugin_name_from_action(A.QUIT) == ""


def test_plugin_shortcut_actions():
    backlog = next(p for p in load_plugins([]) if p.name == "Backlog")
    registry = A.plugin_shortcut_actions(backlog)
    action = registry.match(KeyEvent.char("b"))
    assert action.id == "shortcut:0"
    assert action.label == "Ready"


def test_edit_actions_follow_focused_field():
    title = A.edit_field_actions("title")
    assert title.match(KeyEvent("enter")).id == A.QUICK_SAVE
    assert title.match(KeyEvent("down")) is None

    status = A.edit_field_actions("status")
    assert status.match(KeyEvent("enter")) is None
    assert status.match(KeyEvent("down")).id == A.NEXT_VALUE
    assert status.match(KeyEvent("s", "", Mod.CTRL)).id == A.SAVE_TASK

    description = A.edit_field_actions("description")
    assert description.match(KeyEvent("tab")).id == A.NEXT_FIELD
    assert description.match(KeyEvent("tab", "", Mod.SHIFT)).id == A.PREV_FIELD


def test_key_display():
    assert A.key_action(A.SAVE_TASK, "s", modifiers=Mod.CTRL).key_display == "Ctrl-S"
    assert A.rune_action(A.SEARCH, "/").key_display == "/"
