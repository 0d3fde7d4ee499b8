"""Tests for the layout and header models and listener registry."""

from datetime import datetime, timezone

from tiki.listeners import NO_LISTENER, ListenerRegistry
from tiki.model.layout import BurndownPoint, HeaderModel, LayoutModel


def test_listener_ids_start_at_one():
    registry = ListenerRegistry()
    first = registry.add(lambda: None)
    second = registry.add(lambda: None)
    assert NO_LISTENER not in (first, second)
    assert second > first


def test_listener_may_remove_itself():
    registry = ListenerRegistry()
    calls = []

    def once():
        calls.append(True)
        registry.remove(listener_id)

    listener_id = registry.add(once)
    registry.notify()
    registry.notify()
    assert calls == [True]
    assert len(registry) == 0


def test_layout_content_and_revision():
    layout = LayoutModel("plugin:Kanban")
    calls = []
    layout.add_listener(lambda: calls.append(layout.content))

    layout.set_content("task_detail", {"ticketID": "TIKI-AAAAAA"})

    assert layout.revision == 1
    assert calls == [("task_detail", {"ticketID": "TIKI-AAAAAA"})]


def test_layout_content_is_a_copy():
    layout = LayoutModel("task_detail", {"ticketID": "TIKI-AAAAAA"})
    _, params = layout.content
    params["ticketID"] = "changed"
    assert layout.content[1]["ticketID"] == "TIKI-AAAAAA"


def test_header_snapshot():
    header = HeaderModel()
    point = BurndownPoint(datetime(2026, 3, 2, tzinfo=timezone.utc), 4)
    header.set_stats([("User", "alice")])
    header.set_burndown([point])
    header.set_hints([("q", "Quit")])
    header.set_message("saved")

    state = header.snapshot()
    assert state.visible
    assert state.stats == (("User", "alice"),)
    assert state.burndown == (point,)
    assert state.hints == (("q", "Quit"),)
    assert state.message == "saved"


def test_header_toggle_notifies():
    header = HeaderModel()
    calls = []
    header.add_listener(lambda: calls.append(header.snapshot().visible))
    assert header.toggle() is False
    header.set_visible(True)
    assert calls == [False, True]
