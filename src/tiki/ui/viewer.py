"""Standalone markdown viewer for ``tiki <file.md|URL>``."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import urljoin, urlparse

import httpx
from textual.app import App, ComposeResult
from textual.widgets import Footer, Markdown, MarkdownViewer

from tiki.errors import IOFailure

logger = logging.getLogger(__name__)


def is_url(target: str) -> bool:
    return urlparse(target).scheme in ("http", "https")


def fetch_url(url: str) -> str:
    """GET a document over HTTP(S). Raises IOFailure."""
    try:
        resp = httpx.get(url, timeout=10, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise IOFailure(f"cannot fetch {url}: {e}") from e
    return resp.text


def load_document(target: str) -> str:
    """Markdown text of a file path or URL. Raises IOFailure."""
    if is_url(target):
        return fetch_url(target)
    try:
        return Path(target).read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"cannot read {target}: {e}") from e


class MarkdownViewerApp(App):
    """Shows one markdown document; relative links open in place."""

    TITLE = "tiki viewer"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("escape", "quit", "Quit"),
        ("left", "back", "Back"),
        ("right", "forward", "Forward"),
    ]

    def __init__(self, target: str):
        super().__init__()
        self.target = target
        self.current = target

    def compose(self) -> ComposeResult:
        yield MarkdownViewer(show_table_of_contents=False)
        yield Footer()

    async def on_mount(self) -> None:
        viewer = self.query_one(MarkdownViewer)
        self.sub_title = self.target
        if is_url(self.target):
            self.run_worker(self._show_url(self.target), exclusive=True)
            return
        try:
            await viewer.go(Path(self.target))
        except OSError as e:
            logger.warning("cannot open %s: %s", self.target, e)
            viewer.document.update(f"# Not found\n\nCould not open `{self.target}`.")

    async def _show_url(self, url: str) -> None:
        # fetch off the event loop so the viewer stays responsive
        try:
            text = await asyncio.to_thread(load_document, url)
        except IOFailure as e:
            logger.warning("%s", e)
            text = f"# Error\n\n{e}"
        self.current = url
        self.sub_title = url
        await self.query_one(MarkdownViewer).document.update(text)

    def on_markdown_link_clicked(self, event: Markdown.LinkClicked) -> None:
        # relative links in local files are handled by MarkdownViewer itself
        href = event.href
        if is_url(href):
            self.run_worker(self._show_url(href), exclusive=True)
        elif is_url(self.current) and not href.startswith("#"):
            self.run_worker(self._show_url(urljoin(self.current, href)), exclusive=True)

    async def action_back(self) -> None:
        await self.query_one(MarkdownViewer).back()

    async def action_forward(self) -> None:
        await self.query_one(MarkdownViewer).forward()
