"""Plugin board controller: lanes, selection, moves, search and shortcuts."""

from __future__ import annotations

import logging
from typing import Callable

from tiki.config import save_plugin_view_mode
from tiki.context import AppContext
from tiki.controller import actions as A
from tiki.controller.navigation import NavigationController
from tiki.errors import TikiError
from tiki.filter import FilterContext
from tiki.model.plugin_config import DOWN, LEFT, RIGHT, UP, PluginConfig
from tiki.model.view import TASK_DETAIL, TASK_EDIT, TaskDetailParams, TaskEditParams
from tiki.plugin.definition import Plugin
from tiki.plugin.lane_actions import Delete, LaneAction, NewTicket, OpenDetail, OpenEdit
from tiki.sort import sort_tickets
from tiki.task import Ticket

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


def _log_report(message: str) -> None:
    logger.info("%s", message)


class PluginController:
    """Handles board actions for one tiki plugin.

    Lane contents are recomputed from the store on every call, with the
    clock sampled once per refresh.
    """

    def __init__(
        self,
        ctx: AppContext,
        plugin: Plugin,
        nav: NavigationController,
        config: PluginConfig | None = None,
        report: Reporter = _log_report,
    ):
        self.ctx = ctx
        self.plugin = plugin
        self.nav = nav
        self.config = config or PluginConfig(plugin)
        self.report = report
        self.registry = A.compose(A.plugin_view_actions(), A.plugin_shortcut_actions(plugin))

    @property
    def name(self) -> str:
        return self.plugin.name

    # --- Lane contents ---

    def lane_tickets(self, lane: int, fctx: FilterContext | None = None) -> list[Ticket]:
        """Tickets in one lane: lane filter, then search membership, then plugin sort."""
        if not 0 <= lane < len(self.plugin.lanes):
            return []
        fctx = fctx or self.ctx.filter_context()
        lane_filter = self.plugin.lanes[lane].filter
        tickets = [t for t in self.ctx.store.tickets() if lane_filter.matches(t, fctx)]
        search = self.config.search
        if search.results is not None:
            hits = {ticket_id for ids in search.results.values() for ticket_id in ids}
            tickets = [t for t in tickets if t.id in hits]
        return sort_tickets(tickets, self.plugin.sort)

    def all_lanes(self) -> list[list[Ticket]]:
        fctx = self.ctx.filter_context()
        return [self.lane_tickets(i, fctx) for i in range(len(self.plugin.lanes))]

    def selected_ticket(self) -> Ticket | None:
        lane = self.config.selected_lane
        tickets = self.lane_tickets(lane)
        index = self.config.selected_index(lane)
        if 0 <= index < len(tickets):
            return tickets[index]
        return None

    def ensure_selection(self) -> None:
        """Clamp every lane and move off an empty lane onto the first non-empty one."""
        lanes = self.all_lanes()
        self.config.clamp_selection([len(t) for t in lanes])
        if lanes and not lanes[self.config.selected_lane]:
            self._select_first_non_empty(lanes)

    def _select_first_non_empty(self, lanes: list[list[Ticket]]) -> bool:
        for lane, tickets in enumerate(lanes):
            if tickets:
                self.config.set_selection(lane, 0)
                return True
        return False

    def select_ticket(self, lane: int, ticket_id: str) -> None:
        tickets = self.lane_tickets(lane)
        index = next((i for i, t in enumerate(tickets) if t.id == ticket_id), 0)
        self.config.set_selection(lane, index)

    # --- Dispatch ---

    def handle_action(self, action_id: str) -> bool:
        match action_id:
            case A.NAV_UP:
                return self._nav(UP)
            case A.NAV_DOWN:
                return self._nav(DOWN)
            case A.NAV_LEFT:
                return self._nav(LEFT)
            case A.NAV_RIGHT:
                return self._nav(RIGHT)
            case A.NEXT_LANE:
                return self._switch_lane(1)
            case A.PREV_LANE:
                return self._switch_lane(-1)
            case A.MOVE_LEFT:
                return self.move_ticket(-1)
            case A.MOVE_RIGHT:
                return self.move_ticket(1)
            case A.OPEN_TASK:
                return self.open_ticket()
            case A.NEW_TASK:
                return self.new_ticket()
            case A.DELETE_TASK:
                return self.delete_ticket()
            case A.SEARCH:
                self.config.open_search()
                return True
            case A.TOGGLE_VIEW_MODE:
                return self.toggle_view_mode()
        if action_id.startswith(A.SHORTCUT_PREFIX):
            return self.run_shortcut(int(action_id[len(A.SHORTCUT_PREFIX) :]))
        return False

    # --- Navigation ---

    def _nav(self, direction: str) -> bool:
        lane = self.config.selected_lane
        if self.config.move_selection(direction, len(self.lane_tickets(lane))):
            return True
        if direction in (LEFT, RIGHT):
            return self._switch_lane(-1 if direction == LEFT else 1)
        return False

    def _switch_lane(self, step: int) -> bool:
        """Select the nearest non-empty lane in the given direction."""
        fctx = self.ctx.filter_context()
        lane = self.config.selected_lane + step
        while 0 <= lane < len(self.plugin.lanes):
            tickets = self.lane_tickets(lane, fctx)
            if tickets:
                self.config.set_selection(lane, min(self.config.selected_index(lane), len(tickets) - 1))
                return True
            lane += step
        return False

    # --- Ticket operations ---

    def move_ticket(self, offset: int) -> bool:
        """Apply the neighbouring lane's action to the selected ticket and follow it there."""
        ticket = self.selected_ticket()
        if ticket is None:
            return False
        target = self.config.selected_lane + offset
        if not 0 <= target < len(self.plugin.lanes):
            return False
        action = self.plugin.lanes[target].action
        if action is None:
            self.report(f"lane {self.plugin.lanes[target].name} has no action")
            return False
        if not self._apply(ticket, action):
            return False
        self.select_ticket(target, ticket.id)
        return True

    def _apply(self, ticket: Ticket, action: LaneAction) -> bool:
        updated = action.apply(ticket)
        try:
            self.ctx.store.update(updated)
        except TikiError as e:
            logger.warning("could not update %s: %s", ticket.id, e)
            self.report(str(e))
            return False
        return True

    def open_ticket(self) -> bool:
        ticket = self.selected_ticket()
        if ticket is None:
            return False
        self.nav.push(TASK_DETAIL, TaskDetailParams(ticket.id).encode())
        return True

    def edit_ticket(self) -> bool:
        ticket = self.selected_ticket()
        if ticket is None:
            return False
        self.nav.push(TASK_EDIT, TaskEditParams(ticket.id).encode())
        return True

    def new_ticket(self) -> bool:
        draft = self.ctx.store.new_ticket_template()
        self.nav.push(TASK_EDIT, TaskEditParams(draft=draft).encode())
        logger.info("new ticket draft started from %s", self.plugin.name)
        return True

    def delete_ticket(self) -> bool:
        ticket = self.selected_ticket()
        if ticket is None:
            return False
        try:
            self.ctx.store.delete(ticket.id)
        except TikiError as e:
            logger.warning("could not delete %s: %s", ticket.id, e)
            self.report(str(e))
            return False
        self.ensure_selection()
        self.report(f"deleted {ticket.id}")
        return True

    def run_shortcut(self, index: int) -> bool:
        if not 0 <= index < len(self.plugin.actions):
            return False
        action = self.plugin.actions[index].action
        match action.command:
            case Delete():
                return self.delete_ticket()
            case OpenDetail():
                return self.open_ticket()
            case OpenEdit():
                return self.edit_ticket()
            case NewTicket():
                return self.new_ticket()
        ticket = self.selected_ticket()
        if ticket is None:
            return False
        if not self._apply(ticket, action):
            return False
        self.ensure_selection()
        return True

    def toggle_view_mode(self) -> bool:
        mode = self.config.toggle_view_mode()
        try:
            save_plugin_view_mode(self.plugin, mode, self.ctx.paths)
        except TikiError as e:
            logger.warning("could not save view mode for %s: %s", self.plugin.name, e)
            self.report(str(e))
        return True

    # --- Search ---

    @property
    def search_editing(self) -> bool:
        return self.config.search.editing

    def search_input(self, text: str) -> None:
        self.config.set_search_query(self.config.search.query + text)

    def search_backspace(self) -> None:
        self.config.set_search_query(self.config.search.query[:-1])

    def submit_search(self) -> bool:
        """Run the query through every lane's filter and show only the hits."""
        query = self.config.search.query.strip()
        if not query:
            self.config.clear_search()
            return True
        fctx = self.ctx.filter_context()
        results = {}
        for i, lane in enumerate(self.plugin.lanes):
            hits = self.ctx.store.search(query, lambda t, f=lane.filter: f.matches(t, fctx))
            results[i] = [r.ticket.id for r in hits]
        self.config.apply_search_results(results)
        total = sum(len(ids) for ids in results.values())
        if not total:
            self.report(f"no tickets match {query!r}")
        logger.debug("search %r matched %d tickets", query, total)
        return True

    def clear_search(self) -> bool:
        """Close the search, returning True when there was one to close."""
        search = self.config.search
        if not search.editing and not search.active and not search.query:
            return False
        self.config.clear_search()
        return True
