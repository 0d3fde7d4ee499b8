"""Markdown document view for doki plugins."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Markdown, Static

from tiki.controller.doki import DokiController


class DocumentScroll(VerticalScroll, can_focus=False):
    """Scrolls the document without taking key focus."""


class DokiView(Vertical):
    DEFAULT_CSS = """
    DokiView {
        height: 1fr;
    }
    DokiView #doki-title {
        height: 1;
        text-style: bold;
        background: $primary-darken-2;
        padding: 0 1;
    }
    DokiView #doki-scroll {
        height: 1fr;
        padding: 0 1;
    }
    DokiView #doki-links {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller: DokiController | None = None
        self._shown = None

    def compose(self) -> ComposeResult:
        yield Static(id="doki-title")
        with DocumentScroll(id="doki-scroll"):
            yield Markdown(id="doki-body")
        yield Static(id="doki-links")

    def show(self, controller: DokiController) -> None:
        self.controller = controller
        self.refresh_view()

    def refresh_view(self) -> None:
        controller = self.controller
        if controller is None or not self.is_mounted:
            return
        document = controller.document or controller.load()
        title = Text(controller.plugin.name, style="bold")
        if document.source:
            title.append(f"  {document.source}", style="dim")
        self.query_one("#doki-title", Static).update(title)
        if document is not self._shown:
            self._shown = document
            self.query_one("#doki-body", Markdown).update(document.text)

        links = Text()
        if controller.links:
            link = controller.links[controller.selected_link]
            links.append(f"Link {controller.selected_link + 1}/{len(controller.links)}: ")
            links.append(link.text or link.href, style="bold underline")
            links.append(f" → {link.href}", style="dim")
        self.query_one("#doki-links", Static).update(links)
