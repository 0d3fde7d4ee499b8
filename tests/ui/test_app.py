"""End-to-end tests driving the app with the Textual pilot."""

from datetime import datetime, timedelta, timezone

import pytest
from textual.widgets import ContentSwitcher

from tiki.config import Config
from tiki.context import AppContext
from tiki.git import FileVersion
from tiki.plugin import load_plugins
from tiki.store import TikiStore
from tiki.ui.app import ConfirmInitScreen, TikiApp
from tiki.ui.header import HeaderBar
from tiki.ui.main import MainScreen

SIZE = (120, 40)


def _current(app):
    return app.screen.query_one("#content", ContentSwitcher).current


@pytest.mark.asyncio
async def test_create_and_move_ticket(ctx, fake_vcs):
    """n opens a draft, typing fills the title, Ctrl-S saves, Shift-Right moves it."""
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        assert isinstance(app.screen, MainScreen)
        assert _current(app) == "board"

        await pilot.press("n")
        assert _current(app) == "edit"
        await pilot.press(*"hello", "space", *"world")
        await pilot.press("ctrl+s")
        await pilot.pause()

        assert _current(app) == "board"
        tickets = ctx.store.tickets()
        assert len(tickets) == 1
        ticket = tickets[0]
        assert ticket.title == "hello world"
        assert ticket.status == "backlog"
        assert ticket.priority == 3
        assert ticket.points == 5

        await pilot.press("shift+right")
        await pilot.press("shift+right")
        await pilot.pause()

        assert ctx.store.get(ticket.id).status == "in_progress"
        assert fake_vcs.added.count(ctx.store.path_for(ticket.id)) == 3


@pytest.mark.asyncio
async def test_detail_fullscreen_hides_header(ctx, write_ticket):
    write_ticket("TIKI-AAAAAA", "Look at me", description="Some **markdown**")
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.press("enter")
        assert _current(app) == "detail"
        header = app.screen.query_one(HeaderBar)
        assert header.display

        await pilot.press("f")
        assert not header.display

        await pilot.press("escape")
        assert header.display
        assert _current(app) == "detail"

        await pilot.press("escape")
        assert _current(app) == "board"


@pytest.mark.asyncio
async def test_f10_toggles_header(ctx):
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        header = app.screen.query_one(HeaderBar)
        await pilot.press("f10")
        assert not header.display
        await pilot.press("f10")
        assert header.display


@pytest.mark.asyncio
async def test_plugin_keys_switch_views(ctx):
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.press("f2")
        assert _current(app) == "doki"
        assert app.screen.nav.current().view_id == "plugin:Docs"

        await pilot.press("f3")
        assert _current(app) == "board"
        assert app.screen.nav.current().view_id == "plugin:Backlog"


@pytest.mark.asyncio
async def test_start_plugin(ctx):
    app = TikiApp(ctx, start_plugin="Recent", build_history=False)
    async with app.run_test(size=SIZE):
        assert app.screen.nav.current().view_id == "plugin:Recent"


@pytest.mark.asyncio
async def test_search_from_keyboard(ctx, write_ticket):
    write_ticket("TIKI-AAAAAA", "Alpha")
    write_ticket("TIKI-BBBBBB", "Beta")
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.press("slash", *"beta", "enter")
        controller = app.screen.router.controller_for()
        assert [t.id for t in controller.lane_tickets(0)] == ["TIKI-BBBBBB"]

        await pilot.press("escape")
        assert len(controller.lane_tickets(0)) == 2


@pytest.mark.asyncio
async def test_quit_key_exits(ctx):
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.press("q")
        await pilot.pause()
    assert app.return_code == 0


@pytest.mark.asyncio
async def test_burndown_reaches_header(ctx, fake_vcs, task_dir):
    path = task_dir / "tiki-aaaaaa.md"
    when = datetime.now(timezone.utc) - timedelta(days=3)
    fake_vcs.versions = {str(path): [FileVersion(str(path), "c1", when, "---\nstatus: ready\n---\n")]}
    app = TikiApp(ctx)
    async with app.run_test(size=SIZE) as pilot:
        header = app.screen.header
        for _ in range(100):
            if header.snapshot().burndown:
                break
            await pilot.pause(0.02)
        points = [p.points for p in header.snapshot().burndown]
        assert len(points) == 28
        assert points[0] == 0
        assert points[-1] == 1


@pytest.fixture
def fresh_ctx(paths, fake_vcs):
    """Context for a directory without a ticket directory."""
    store = TikiStore(paths.task_dir, vcs=fake_vcs)
    return AppContext(paths=paths, config=Config(), vcs=fake_vcs, store=store, plugins=load_plugins([]))


@pytest.mark.asyncio
async def test_confirm_init_creates_project(fresh_ctx):
    app = TikiApp(fresh_ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        assert isinstance(app.screen, ConfirmInitScreen)
        await pilot.click("#yes")
        await pilot.pause()

        assert isinstance(app.screen, MainScreen)
        assert fresh_ctx.paths.is_initialized()
        assert len(fresh_ctx.store) == 1


@pytest.mark.asyncio
async def test_declining_init_exits(fresh_ctx):
    app = TikiApp(fresh_ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.click("#no")
        await pilot.pause()
    assert not fresh_ctx.paths.is_initialized()


@pytest.mark.asyncio
async def test_main_screen_follows_navigation(ctx, write_ticket):
    write_ticket("TIKI-AAAAAA", "Open me")
    app = TikiApp(ctx, build_history=False)
    async with app.run_test(size=SIZE) as pilot:
        screen = app.screen
        assert isinstance(screen, MainScreen)
        assert screen.layout_model.content[0] == "plugin:Kanban"

        await pilot.press("enter")
        view_id, params = screen.layout_model.content
        assert view_id == "task_detail"
        assert params["ticketID"] == "TIKI-AAAAAA"
