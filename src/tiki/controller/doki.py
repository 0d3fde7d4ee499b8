"""Doki plugin controller: markdown documents with link cycling and history."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path

from markdown_it import MarkdownIt

from tiki.context import AppContext
from tiki.controller import actions as A
from tiki.plugin.definition import FETCHER_FILE, FETCHER_INTERNAL, Plugin

logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark")


@dataclass(frozen=True)
class Link:
    text: str
    href: str

    @property
    def is_external(self) -> bool:
        return "://" in self.href or self.href.startswith("mailto:")


@dataclass(frozen=True)
class Document:
    """A loaded page. ``source`` is relative to the documents directory, empty for internal text."""

    source: str
    text: str

    @property
    def base(self) -> str:
        return posixpath.dirname(self.source)


def extract_links(text: str) -> list[Link]:
    """Links in document order, anchors and images excluded."""
    links = []
    for token in _md.parse(text):
        if token.type != "inline" or not token.children:
            continue
        href, label = None, []
        for child in token.children:
            if child.type == "link_open":
                href, label = child.attrGet("href") or "", []
            elif child.type == "link_close" and href is not None:
                if href and not href.startswith("#"):
                    links.append(Link("".join(label), href))
                href = None
            elif href is not None and child.type in ("text", "code_inline"):
                label.append(child.content)
    return links


class DokiController:
    """Document viewer state for one doki plugin.

    History is browser-like: following a link truncates the forward list.
    """

    def __init__(self, ctx: AppContext, plugin: Plugin, report=None):
        self.ctx = ctx
        self.plugin = plugin
        self.report = report or (lambda message: logger.info("%s", message))
        self.registry = A.doki_view_actions()
        self._history: list[Document] = []
        self._position = -1
        self.selected_link = -1
        self.links: list[Link] = []

    @property
    def name(self) -> str:
        return self.plugin.name

    @property
    def document(self) -> Document | None:
        if self._position < 0:
            return None
        return self._history[self._position]

    def can_go_back(self) -> bool:
        return self._position > 0

    def can_go_forward(self) -> bool:
        return self._position < len(self._history) - 1

    # --- Loading ---

    def _read(self, source: str) -> str:
        path = (Path(self.ctx.paths.doki_dir) / source).resolve()
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("cannot load document %s: %s", path, e)
            return f"# Not found\n\nCould not load `{source}`: {e.strerror or e}"

    def initial_document(self) -> Document:
        if self.plugin.fetcher == FETCHER_FILE:
            return Document(self.plugin.url, self._read(self.plugin.url))
        if self.plugin.fetcher == FETCHER_INTERNAL:
            return Document("", self.plugin.text)
        return Document("", f"Unknown fetcher {self.plugin.fetcher!r}")

    def load(self) -> Document:
        """Open the plugin's start page, resetting history."""
        document = self.initial_document()
        self._history = [document]
        self._position = 0
        self._set_links(document)
        return document

    def _set_links(self, document: Document) -> None:
        self.links = extract_links(document.text)
        self.selected_link = 0 if self.links else -1

    # --- Actions ---

    def handle_action(self, action_id: str) -> bool:
        if self.document is None:
            self.load()
        match action_id:
            case A.NEXT_LINK:
                return self._cycle_link(1)
            case A.PREV_LINK:
                return self._cycle_link(-1)
            case A.FOLLOW_LINK:
                return self.follow_link()
            case A.NAVIGATE_BACK:
                return self.go_back()
            case A.NAVIGATE_FORWARD:
                return self.go_forward()
        return False

    def _cycle_link(self, step: int) -> bool:
        if not self.links:
            return False
        self.selected_link = (self.selected_link + step) % len(self.links)
        return True

    def follow_link(self) -> bool:
        if not 0 <= self.selected_link < len(self.links):
            return False
        link = self.links[self.selected_link]
        if link.is_external:
            self.report(f"external link: {link.href}")
            return False
        target = link.href.split("#", 1)[0]
        if not target.endswith(".md"):
            self.report(f"not a markdown document: {link.href}")
            return False
        source = posixpath.normpath(posixpath.join(self.document.base, target))
        self.open(source)
        return True

    def open(self, source: str) -> Document:
        """Load a document relative to the documents directory and push it onto history."""
        document = Document(source, self._read(source))
        del self._history[self._position + 1 :]
        self._history.append(document)
        self._position = len(self._history) - 1
        self._set_links(document)
        logger.debug("opened document %s", source)
        return document

    def go_back(self) -> bool:
        if not self.can_go_back():
            return False
        self._position -= 1
        self._set_links(self.document)
        return True

    def go_forward(self) -> bool:
        if not self.can_go_forward():
            return False
        self._position += 1
        self._set_links(self.document)
        return True
