"""Tests for the markdown document controller."""

import pytest

from tiki.controller import actions as A
from tiki.controller.doki import DokiController, extract_links
from tiki.plugin import build_plugin


@pytest.fixture
def docs(ctx):
    """index.md linking to a guide in a subdirectory, which links back."""
    doki = ctx.paths.doki_dir
    (doki / "guide").mkdir(parents=True)
    (doki / "index.md").write_text(
        "# Index\n\nSee [the guide](guide/start.md), [home](https://example.com) and [top](#index).\n"
    )
    (doki / "guide" / "start.md").write_text("# Start\n\n[Back](../index.md) or [missing](gone.md)\n")
    return ctx


@pytest.fixture
def messages():
    return []


@pytest.fixture
def controller(docs, messages):
    plugin = build_plugin({"name": "Docs", "type": "doki", "fetcher": "file", "url": "index.md"})
    controller = DokiController(docs, plugin, report=messages.append)
    controller.load()
    return controller


def test_extract_links_skips_anchors():
    links = extract_links("[a](one.md) [b](#here) and `[c](code.md)` [**d**](two.md)")
    assert [(link.text, link.href) for link in links] == [("a", "one.md"), ("d", "two.md")]


def test_load_file_document(controller):
    assert controller.document.source == "index.md"
    assert controller.document.text.startswith("# Index")
    assert [link.href for link in controller.links] == ["guide/start.md", "https://example.com"]
    assert controller.selected_link == 0
    assert not controller.can_go_back()


def test_internal_document(ctx):
    plugin = build_plugin({"name": "Notes", "type": "doki", "fetcher": "internal", "text": "# Notes\n[x](a.md)"})
    controller = DokiController(ctx, plugin)
    document = controller.load()
    assert document.source == ""
    assert controller.links[0].href == "a.md"


def test_link_cycling_wraps(controller):
    assert controller.handle_action(A.NEXT_LINK)
    assert controller.selected_link == 1
    controller.handle_action(A.NEXT_LINK)
    assert controller.selected_link == 0
    controller.handle_action(A.PREV_LINK)
    assert controller.selected_link == 1


def test_follow_relative_link_and_history(controller):
    assert controller.handle_action(A.FOLLOW_LINK)
    assert controller.document.source == "guide/start.md"
    assert controller.links[0].href == "../index.md"

    assert controller.handle_action(A.FOLLOW_LINK)
    assert controller.document.source == "index.md"

    assert controller.handle_action(A.NAVIGATE_BACK)
    assert controller.document.source == "guide/start.md"
    assert controller.can_go_forward()

    assert controller.handle_action(A.NAVIGATE_FORWARD)
    assert controller.document.source == "index.md"
    assert not controller.handle_action(A.NAVIGATE_FORWARD)


def test_following_truncates_forward_history(controller):
    controller.follow_link()
    controller.go_back()
    controller.follow_link()
    assert not controller.can_go_forward()
    assert controller.can_go_back()


def test_external_link_is_reported(controller, messages):
    controller.handle_action(A.NEXT_LINK)
    assert not controller.handle_action(A.FOLLOW_LINK)
    assert messages == ["external link: https://example.com"]
    assert controller.document.source == "index.md"


def test_missing_document_shows_placeholder(controller):
    controller.follow_link()
    controller.handle_action(A.NEXT_LINK)
    controller.follow_link()
    assert controller.document.source == "guide/gone.md"
    assert controller.document.text.startswith("# Not found")


def test_back_at_start(controller):
    assert not controller.handle_action(A.NAVIGATE_BACK)
