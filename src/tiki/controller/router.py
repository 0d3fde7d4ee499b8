"""Key routing: picks the registry for the current view and dispatches its action."""

from __future__ import annotations

import logging
from typing import Callable

from tiki.context import AppContext
from tiki.controller import actions as A
from tiki.controller.doki import DokiController
from tiki.controller.navigation import Frame, NavigationController
from tiki.controller.plugin import PluginController
from tiki.controller.task import TaskController
from tiki.keys import KeyEvent
from tiki.model.layout import HeaderModel
from tiki.model.view import TASK_DETAIL, TASK_EDIT, plugin_name, plugin_view_id
from tiki.plugin.definition import DOKI

logger = logging.getLogger(__name__)

ViewController = PluginController | DokiController


class InputRouter:
    """Turns key events into controller calls.

    Registries are composed global first, so the current view's own
    bindings win a key they share with the global set. Keys are tried in
    this order: open search input, full-screen Esc, edit view, active
    search Esc, then the composed registry.
    """

    def __init__(
        self,
        ctx: AppContext,
        nav: NavigationController,
        header: HeaderModel,
        task_controller: TaskController,
        on_quit: Callable[[], None] = lambda: None,
    ):
        self.ctx = ctx
        self.nav = nav
        self.header = header
        self.task = task_controller
        self.on_quit = on_quit
        self.global_registry = A.global_actions()
        self.activation_registry = A.plugin_activation_actions(ctx.plugins)
        self.controllers: dict[str, ViewController] = {}
        for plugin in ctx.plugins:
            if plugin.type == DOKI:
                self.controllers[plugin.name] = DokiController(ctx, plugin, report=header.set_message)
            else:
                self.controllers[plugin.name] = PluginController(ctx, plugin, nav, report=header.set_message)

    def controller_for(self, frame: Frame | None = None) -> ViewController | None:
        frame = frame or self.nav.current()
        return self.controllers.get(plugin_name(frame.view_id))

    def registry_for(self, frame: Frame | None = None) -> A.ActionRegistry:
        frame = frame or self.nav.current()
        if frame.view_id == TASK_DETAIL:
            return A.compose(self.global_registry, self.task.detail_registry)
        if frame.view_id == TASK_EDIT:
            session = self.task.session
            return A.compose(self.global_registry, A.edit_field_actions(session.focus if session else "title"))
        controller = self.controller_for(frame)
        if controller is None:
            return self.global_registry
        return A.compose(self.global_registry, self.activation_registry, controller.registry)

    def hints(self) -> list[tuple[str, str]]:
        """(key, label) pairs shown in the header for the current view."""
        return [(a.key_display, a.label) for a in self.registry_for().header_actions()]

    # --- Dispatch ---

    def handle(self, event: KeyEvent) -> bool:
        frame = self.nav.current()
        logger.debug("key %s rune=%r mods=%d on %s", event.key, event.rune, event.modifiers, frame.view_id)
        controller = self.controller_for(frame)

        if isinstance(controller, PluginController) and controller.search_editing:
            return self._search_input(controller, event)
        if frame.view_id == TASK_DETAIL and event.key == "escape" and self.task.exit_fullscreen():
            return True
        if frame.view_id == TASK_EDIT:
            return self._edit_input(frame, event)
        if isinstance(controller, PluginController) and event.key == "escape" and controller.clear_search():
            return True

        action = self.registry_for(frame).match(event)
        if action is None:
            return False
        if self.global_registry.find(action.id) is not None:
            return self._global(action.id)
        target = A.plugin_name_from_action(action.id)
        if target:
            return self._activate_plugin(frame, target)
        if frame.view_id == TASK_DETAIL:
            return self.task.handle_detail_action(action.id, frame.params)
        if controller is not None:
            return controller.handle_action(action.id)
        return False

    def _global(self, action_id: str) -> bool:
        match action_id:
            case A.BACK:
                return self.nav.pop()
            case A.QUIT:
                self.on_quit()
                return True
            case A.REFRESH:
                self.ctx.store.reload()
                self.header.set_message("reloaded")
                return True
            case A.TOGGLE_HEADER:
                self.header.toggle()
                return True
        return False

    def _activate_plugin(self, frame: Frame, name: str) -> bool:
        view_id = plugin_view_id(name)
        if frame.view_id != view_id:
            self.nav.replace(view_id)
        return True

    def _search_input(self, controller: PluginController, event: KeyEvent) -> bool:
        if event.key == "escape":
            return controller.clear_search()
        if event.key == "enter":
            return controller.submit_search()
        if event.key == "backspace":
            controller.search_backspace()
            return True
        if event.is_rune:
            controller.search_input(event.rune)
            return True
        return False

    def _edit_input(self, frame: Frame, event: KeyEvent) -> bool:
        session = self.task.prepare(frame.params)
        if session is None:
            return self.nav.pop()
        action = A.edit_field_actions(session.focus).match(event)
        if action is not None:
            return self.task.handle_edit_action(action.id)
        if event.key == "escape":
            return self.task.cancel()
        if event.key == "f10" and not event.modifiers:
            self.header.toggle()
            return True
        if event.is_rune:
            return self.task.type_text(event.rune)
        if event.key == "space":
            return self.task.type_text(" ")
        if event.key == "backspace":
            return self.task.backspace()
        if event.key == "enter":
            return self.task.newline()
        return False

    def activate_current(self) -> None:
        """Prepare the controller behind the top frame after navigation."""
        frame = self.nav.current()
        controller = self.controller_for(frame)
        if isinstance(controller, PluginController):
            controller.ensure_selection()
        elif isinstance(controller, DokiController) and controller.document is None:
            controller.load()
        elif frame.view_id == TASK_EDIT:
            self.task.prepare(frame.params)
