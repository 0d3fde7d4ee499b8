"""Tests for per-plugin selection, view mode and search state."""

import pytest

from tiki.model.plugin_config import DOWN, LEFT, RIGHT, UP, PluginConfig
from tiki.model.search import GridSelection, LaneSelection
from tiki.plugin import COMPACT, EXPANDED, build_plugin


@pytest.fixture
def grid():
    """One lane laid out in three columns."""
    return PluginConfig(build_plugin({"name": "Grid", "lanes": [{"name": "All", "columns": 3}]}))


@pytest.fixture
def lanes():
    plugin = build_plugin({"name": "Lanes", "lanes": [{"name": "Todo"}, {"name": "Doing"}, {"name": "Done"}]})
    return PluginConfig(plugin)


def test_grid_movement(grid):
    # 7 items: rows [0 1 2] [3 4 5] [6]
    assert grid.move_selection(RIGHT, 7)
    assert grid.move_selection(DOWN, 7)
    assert grid.selected_index() == 4
    assert not grid.move_selection(DOWN, 7)
    assert grid.move_selection(LEFT, 7)
    assert grid.move_selection(DOWN, 7)
    assert grid.selected_index() == 6
    assert not grid.move_selection(RIGHT, 7)
    assert not grid.move_selection(LEFT, 7)
    assert grid.move_selection(UP, 7)
    assert grid.selected_index() == 3


def test_movement_stops_at_edges(grid):
    assert not grid.move_selection(UP, 5)
    assert not grid.move_selection(LEFT, 5)
    assert not grid.move_selection(DOWN, 0)


def test_listeners_run_on_change(grid):
    calls = []
    listener_id = grid.add_listener(lambda: calls.append(True))
    grid.move_selection(RIGHT, 3)
    grid.move_selection(UP, 3)
    assert calls == [True]
    grid.remove_listener(listener_id)
    grid.move_selection(RIGHT, 3)
    assert calls == [True]


def test_set_selection_and_clamp(lanes):
    lanes.set_selection(2, 5)
    assert lanes.selected_lane == 2
    assert lanes.selected_index() == 5

    lanes.clamp_selection([3, 0, 2])
    assert lanes.selected_index(2) == 1

    lanes.set_selection(7, 0)
    assert lanes.selected_lane == 2


def test_ensure_visible_scrolls(grid):
    grid.set_selection(0, 10)
    assert grid.ensure_visible(0, 2) == 2
    grid.set_selection(0, 0)
    assert grid.ensure_visible(0, 2) == 0
    assert grid.scroll_offset(0) == 0


def test_toggle_view_mode(lanes):
    assert lanes.view_mode == EXPANDED
    assert lanes.toggle_view_mode() == COMPACT
    assert lanes.toggle_view_mode() == EXPANDED


def test_search_snapshot_for_grid(grid):
    grid.set_selection(0, 4)
    grid.open_search()
    assert grid.search.saved == GridSelection(4)

    grid.apply_search_results({0: ["TIKI-AAAAAA"]})
    assert grid.selected_index() == 0
    assert grid.search.active

    grid.clear_search()
    assert grid.selected_index() == 4
    assert grid.search.saved is None


def test_search_snapshot_for_lanes(lanes):
    lanes.set_selection(1, 2)
    lanes.open_search()
    lanes.open_search()
    assert lanes.search.saved == LaneSelection("Doing", 2)

    lanes.set_search_query("abc")
    lanes.apply_search_results({0: [], 1: [], 2: ["TIKI-AAAAAA"]})
    assert lanes.selected_lane == 2
    assert not lanes.search.editing

    lanes.clear_search()
    assert lanes.selected_lane == 1
    assert lanes.selected_index() == 2
    assert lanes.search.query == ""


def test_search_copy_is_detached(lanes):
    state = lanes.search
    state.query = "changed"
    assert lanes.search.query == ""
