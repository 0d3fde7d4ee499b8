"""Main Textual application for tiki."""

from __future__ import annotations

import asyncio
import logging

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from tiki.context import AppContext
from tiki.errors import Cancelled, TikiError
from tiki.history import HistoryJob, TaskHistory
from tiki.project import init_project
from tiki.ui.main import MainScreen

logger = logging.getLogger(__name__)


class ConfirmInitScreen(ModalScreen[bool]):
    """Modal screen asking to set up a tiki project."""

    CSS = """
    ConfirmInitScreen {
        align: center middle;
    }
    #dialog {
        width: 70;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #message {
        text-align: center;
        margin-bottom: 1;
    }
    #buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }
    Button {
        margin: 0 2;
    }
    """

    def __init__(self, path):
        super().__init__()
        self.path = path

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(f"No tiki project in {self.path}. Create one?", id="message")
            with Horizontal(id="buttons"):
                yield Button("Yes", id="yes", variant="primary")
                yield Button("No", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")


class TikiApp(App):
    """Terminal issue tracker over markdown tickets."""

    TITLE = "tiki"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, ctx: AppContext, start_plugin: str | None = None, build_history: bool = True):
        super().__init__()
        self.ctx = ctx
        self.start_plugin = start_plugin
        self.build_history = build_history
        self._history_job: HistoryJob | None = None
        self._history_task: asyncio.Task | None = None

    def on_mount(self) -> None:
        self.theme = self.ctx.config.textual_theme
        if not self.ctx.paths.is_initialized():
            self.push_screen(ConfirmInitScreen(self.ctx.paths.project_root), self._on_init_response)
        else:
            self._start()

    def _on_init_response(self, result: bool) -> None:
        if not result:
            self.exit()
            return
        try:
            init_project(self.ctx.paths)
        except TikiError as e:
            logger.error("init failed: %s", e)
            self.exit(message=str(e))
            return
        self._start()

    def _start(self) -> None:
        self.ctx.store.load()
        screen = MainScreen(self.ctx, self.start_plugin)
        self.push_screen(screen)
        if self.build_history:
            self._history_task = asyncio.create_task(self._run_history(screen))

    async def _run_history(self, screen: MainScreen) -> None:
        """Build the burndown off the UI thread and hand it to the header model."""
        history = TaskHistory(self.ctx.vcs, self.ctx.paths.task_dir, now=self.ctx.clock)
        job = HistoryJob(history, post=lambda points: self.call_from_thread(screen.header.set_burndown, points))
        self._history_job = job
        try:
            await asyncio.to_thread(job.run)
        except Cancelled as e:
            logger.debug("%s", e)

    def action_quit(self) -> None:
        """Cancel background work and quit."""
        if self._history_job is not None:
            self._history_job.cancel()
        if self._history_task is not None:
            self._history_task.cancel()
        self.exit()
