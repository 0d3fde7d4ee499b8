"""Tests for the navigation stack."""

from tiki.controller.navigation import MAX_DEPTH, Frame, NavigationController


def test_push_and_pop():
    nav = NavigationController(Frame("plugin:Kanban"))
    changes = []
    nav.on_change = lambda view_id, params: changes.append((view_id, params))

    nav.push("task_detail", {"ticketID": "TIKI-AAAAAA"})
    assert nav.current() == Frame("task_detail", {"ticketID": "TIKI-AAAAAA"})
    assert nav.depth() == 2

    assert nav.pop() is True
    assert nav.current().view_id == "plugin:Kanban"
    assert changes == [("task_detail", {"ticketID": "TIKI-AAAAAA"}), ("plugin:Kanban", {})]


def test_pop_at_root_is_a_no_op():
    nav = NavigationController(Frame("plugin:Kanban"))
    changes = []
    nav.on_change = lambda view_id, params: changes.append(view_id)
    assert nav.pop() is False
    assert nav.depth() == 1
    assert changes == []


def test_replace_top():
    nav = NavigationController(Frame("plugin:Kanban"))
    nav.push("task_detail", {"ticketID": "TIKI-AAAAAA"})
    nav.replace("plugin:Recent")
    assert nav.depth() == 2
    assert nav.current() == Frame("plugin:Recent")


def test_replace_root():
    nav = NavigationController(Frame("plugin:Kanban"))
    nav.replace("plugin:Docs")
    assert nav.depth() == 1
    assert nav.pop() is False
    assert nav.current().view_id == "plugin:Docs"


def test_depth_is_bounded_and_keeps_root():
    nav = NavigationController(Frame("plugin:Kanban"))
    for i in range(MAX_DEPTH + 5):
        nav.push("task_detail", {"n": i})
    assert nav.depth() == MAX_DEPTH
    while nav.pop():
        pass
    assert nav.current().view_id == "plugin:Kanban"


def test_update_params_does_not_notify():
    nav = NavigationController(Frame("plugin:Kanban"))
    nav.push("task_edit", {"focusField": "title"})
    changes = []
    nav.on_change = lambda view_id, params: changes.append(view_id)

    nav.update_params({"focusField": "status"})

    assert nav.current().params == {"focusField": "status"}
    assert changes == []


def test_pushed_params_are_copied():
    nav = NavigationController(Frame("plugin:Kanban"))
    params = {"ticketID": "TIKI-AAAAAA"}
    nav.push("task_detail", params)
    params["ticketID"] = "changed"
    assert nav.current().params["ticketID"] == "TIKI-AAAAAA"
