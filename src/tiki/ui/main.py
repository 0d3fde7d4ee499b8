"""Main screen: header plus the content view for the top navigation frame."""

from __future__ import annotations

import logging

from textual import events
from textual.app import ComposeResult
from textual.message import Message
from textual.screen import Screen
from textual.widgets import ContentSwitcher

from tiki.context import AppContext
from tiki.controller.doki import DokiController
from tiki.controller.navigation import Frame, NavigationController
from tiki.controller.plugin import PluginController
from tiki.controller.router import InputRouter
from tiki.controller.task import TaskController
from tiki.keys import from_textual
from tiki.model.layout import HeaderModel, LayoutModel
from tiki.model.view import TASK_DETAIL, TASK_EDIT, plugin_view_id
from tiki.ui.board import BoardView
from tiki.ui.detail import DetailView
from tiki.ui.doki import DokiView
from tiki.ui.edit import EditView
from tiki.ui.header import HeaderBar

logger = logging.getLogger(__name__)


class MainScreen(Screen):
    """Owns navigation, routes every key through the input router and redraws."""

    DEFAULT_CSS = """
    MainScreen {
        layout: vertical;
    }
    MainScreen #content {
        height: 1fr;
    }
    """

    class StoreChanged(Message):
        """Tickets changed; may be posted from any thread."""

    class ModelChanged(Message):
        """Header or layout model changed; may be posted from any thread."""

    def __init__(self, ctx: AppContext, start_plugin: str | None = None):
        super().__init__()
        self.ctx = ctx
        plugin = (ctx.plugin(start_plugin) if start_plugin else None) or ctx.default_plugin
        self.header = HeaderModel(visible=ctx.config.header_visible)
        self.nav = NavigationController(Frame(plugin_view_id(plugin.name) if plugin else ""))
        self.layout_model = LayoutModel(self.nav.current().view_id)
        self.nav.on_change = self.layout_model.set_content
        self.nav.active_view = self._active_view
        self.task_controller = TaskController(ctx, self.nav, report=self.header.set_message)
        self.router = InputRouter(ctx, self.nav, self.header, self.task_controller, on_quit=self._quit)
        self._revision = -1
        self._listener_ids: list[tuple[object, int]] = []

    def compose(self) -> ComposeResult:
        yield HeaderBar(id="header")
        with ContentSwitcher(initial="board", id="content"):
            yield BoardView(id="board")
            yield DetailView(id="detail")
            yield EditView(id="edit")
            yield DokiView(id="doki")

    def on_mount(self) -> None:
        self._listener_ids = [
            (self.ctx.store, self.ctx.store.add_listener(lambda: self.post_message(self.StoreChanged()))),
            (self.header, self.header.add_listener(lambda: self.post_message(self.ModelChanged()))),
            (self.layout_model, self.layout_model.add_listener(lambda: self.post_message(self.ModelChanged()))),
        ]
        self.header.set_stats(self.ctx.store.stats())
        self.refresh_content()

    def on_unmount(self) -> None:
        for model, listener_id in self._listener_ids:
            model.remove_listener(listener_id)
        self._listener_ids = []

    def _quit(self) -> None:
        self.app.action_quit()

    def _active_view(self):
        return self.query_one("#content", ContentSwitcher).visible_content

    # --- Input ---

    def on_key(self, event: events.Key) -> None:
        key_event = from_textual(event.key, event.character)
        if self.router.handle(key_event):
            event.stop()
            event.prevent_default()
            self.refresh_content()

    # --- Model changes ---

    def on_main_screen_store_changed(self, message: StoreChanged) -> None:
        self.header.set_stats(self.ctx.store.stats())
        self.refresh_content()

    def on_main_screen_model_changed(self, message: ModelChanged) -> None:
        self.refresh_content()

    # --- Rendering ---

    def refresh_content(self) -> None:
        if not self.is_mounted:
            return
        if self.layout_model.revision != self._revision:
            self._revision = self.layout_model.revision
            self.router.activate_current()
        frame = self.nav.current()
        switcher = self.query_one("#content", ContentSwitcher)
        controller = self.router.controller_for(frame)

        if frame.view_id == TASK_DETAIL:
            switcher.current = "detail"
            self.query_one(DetailView).show(self.task_controller.ticket(frame.params))
        elif frame.view_id == TASK_EDIT:
            switcher.current = "edit"
            self.query_one(EditView).show(self.task_controller.prepare(frame.params))
        elif isinstance(controller, DokiController):
            switcher.current = "doki"
            self.query_one(DokiView).show(controller)
        elif isinstance(controller, PluginController):
            switcher.current = "board"
            self.query_one(BoardView).show(controller)

        hints = self.router.hints()
        if hints != list(self.header.snapshot().hints):
            # notifies again; the next pass finds them equal
            self.header.set_hints(hints)

        fullscreen = frame.view_id == TASK_DETAIL and self.task_controller.fullscreen
        self.query_one(HeaderBar).show(self.header.snapshot(), hidden=fullscreen)

