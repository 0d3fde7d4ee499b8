"""Ticket detail and edit-session controller."""

from __future__ import annotations

import logging

from tiki.context import AppContext
from tiki.controller import actions as A
from tiki.controller.navigation import NavigationController
from tiki.errors import Conflict, TikiError
from tiki.model.view import EDIT_FIELDS, TASK_EDIT, TaskDetailParams, TaskEditParams
from tiki.task import MAX_PRIORITY, MIN_PRIORITY, STATUSES, TYPES, Ticket, validate_ticket

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"
TEXT_INPUT_FIELDS = ("title", "assignee", "description")


class EditSession:
    """A draft being edited plus which field has focus.

    Enumerated fields step through their values without wrapping and
    integer fields clamp. Typing into the assignee field replaces the
    shown value on the first keystroke after it gains focus.
    """

    def __init__(self, params: TaskEditParams, draft: Ticket, max_points: int, users: list[str]):
        self.ticket_id = params.ticket_id
        self.draft = draft
        self.focus = params.focus
        self.max_points = max_points
        self.users = [""] + [u for u in users if u]
        self.error = ""
        self._replace_assignee = self.focus == "assignee"

    @property
    def is_new(self) -> bool:
        return not self.ticket_id

    def params(self) -> TaskEditParams:
        return TaskEditParams(self.ticket_id, self.draft, self.focus)

    # --- Focus ---

    def _set_focus(self, field: str) -> None:
        self.focus = field
        self._replace_assignee = field == "assignee"

    def next_field(self) -> None:
        self._set_focus(EDIT_FIELDS[(EDIT_FIELDS.index(self.focus) + 1) % len(EDIT_FIELDS)])

    def prev_field(self) -> None:
        self._set_focus(EDIT_FIELDS[(EDIT_FIELDS.index(self.focus) - 1) % len(EDIT_FIELDS)])

    # --- Value cycling ---

    def _step(self, values, current, step: int):
        if current not in values:
            return values[0]
        index = values.index(current) + step
        return values[index] if 0 <= index < len(values) else current

    def cycle(self, step: int) -> bool:
        """Move the focused enumerated field one value forward (Down) or back (Up)."""
        draft = self.draft
        match self.focus:
            case "status":
                value = self._step(STATUSES, draft.status, step)
                changed, draft.status = value != draft.status, value
            case "type":
                value = self._step(TYPES, draft.type, step)
                changed, draft.type = value != draft.type, value
            case "priority":
                value = min(max(draft.priority + step, MIN_PRIORITY), MAX_PRIORITY)
                changed, draft.priority = value != draft.priority, value
            case "points":
                value = min(max(draft.points + step, 1), self.max_points)
                changed, draft.points = value != draft.points, value
            case "assignee":
                users = self.users if draft.assignee in self.users else self.users + [draft.assignee]
                value = self._step(users, draft.assignee, step)
                changed, draft.assignee = value != draft.assignee, value
                self._replace_assignee = True
            case _:
                return False
        return changed

    # --- Text input ---

    def type_text(self, text: str) -> bool:
        if self.focus not in TEXT_INPUT_FIELDS:
            return False
        if self.focus == "assignee" and self._replace_assignee:
            self.draft.assignee = ""
            self._replace_assignee = False
        setattr(self.draft, self.focus, getattr(self.draft, self.focus) + text)
        return True

    def backspace(self) -> bool:
        if self.focus not in TEXT_INPUT_FIELDS:
            return False
        self._replace_assignee = False
        setattr(self.draft, self.focus, getattr(self.draft, self.focus)[:-1])
        return True

    def newline(self) -> bool:
        if self.focus != "description":
            return False
        self.draft.description += "\n"
        return True

    def display_value(self, field: str) -> str:
        value = getattr(self.draft, field)
        if field == "assignee" and not value:
            return UNASSIGNED
        return str(value)


class TaskController:
    """Owns the detail view's full-screen flag and the current edit session."""

    def __init__(self, ctx: AppContext, nav: NavigationController, report=None):
        self.ctx = ctx
        self.nav = nav
        self.report = report or (lambda message: logger.info("%s", message))
        self.detail_registry = A.task_detail_actions()
        self.fullscreen = False
        self.session: EditSession | None = None

    # --- Detail ---

    def ticket(self, params: dict) -> Ticket | None:
        return self.ctx.store.get(TaskDetailParams.decode(params).ticket_id)

    def handle_detail_action(self, action_id: str, params: dict) -> bool:
        ticket_id = TaskDetailParams.decode(params).ticket_id
        match action_id:
            case A.EDIT_TASK:
                if self.ctx.store.get(ticket_id) is None:
                    return False
                self.nav.push(TASK_EDIT, TaskEditParams(ticket_id).encode())
                return True
            case A.FULLSCREEN:
                self.fullscreen = not self.fullscreen
                return True
        return False

    def exit_fullscreen(self) -> bool:
        if not self.fullscreen:
            return False
        self.fullscreen = False
        return True

    # --- Edit ---

    def prepare(self, params: dict) -> EditSession | None:
        """Session for an edit frame, reusing the live one when it belongs to the same ticket."""
        decoded = TaskEditParams.decode(params)
        session = self.session
        if session is not None and session.ticket_id == decoded.ticket_id and (
            decoded.draft is None or decoded.draft is session.draft
        ):
            return session

        if decoded.draft is not None:
            draft = decoded.draft
        else:
            stored = self.ctx.store.get(decoded.ticket_id)
            if stored is None:
                self.report(f"ticket {decoded.ticket_id} not found")
                return None
            draft = stored.clone()
        self.session = EditSession(decoded, draft, self.ctx.config.max_points, self.ctx.store.all_users())
        self._sync()
        return self.session

    def _sync(self) -> None:
        """Keep the top frame's params in step with the draft."""
        if self.session is not None:
            self.nav.update_params(self.session.params().encode())

    def handle_edit_action(self, action_id: str) -> bool:
        session = self.session
        if session is None:
            return False
        match action_id:
            case A.SAVE_TASK | A.QUICK_SAVE:
                return self.save()
            case A.NEXT_FIELD:
                session.next_field()
            case A.PREV_FIELD:
                session.prev_field()
            case A.NEXT_VALUE:
                session.cycle(1)
            case A.PREV_VALUE:
                session.cycle(-1)
            case _:
                return False
        self._sync()
        return True

    def type_text(self, text: str) -> bool:
        if self.session is None or not self.session.type_text(text):
            return False
        self._sync()
        return True

    def backspace(self) -> bool:
        if self.session is None or not self.session.backspace():
            return False
        self._sync()
        return True

    def newline(self) -> bool:
        if self.session is None or not self.session.newline():
            return False
        self._sync()
        return True

    def save(self) -> bool:
        """Validate and write the draft, then close the edit view.

        On any failure the draft is kept and ``session.error`` says why.
        """
        session = self.session
        if session is None:
            return False
        errors = validate_ticket(session.draft, self.ctx.config.max_points)
        if errors:
            session.error = errors[0]
            self.report(session.error)
            return False

        draft = session.draft.clone()
        try:
            if session.is_new:
                saved = self.ctx.store.create(draft)
            else:
                saved = self.ctx.store.update(draft)
        except Conflict as e:
            session.error = f"{e}; press Esc to discard or reload the ticket"
            self.report(session.error)
            return False
        except TikiError as e:
            logger.warning("saving %s failed: %s", session.ticket_id or "new ticket", e)
            session.error = str(e)
            self.report(session.error)
            return False

        logger.info("saved %s", saved.id)
        self.session = None
        self.nav.pop()
        self.report(f"saved {saved.id}")
        return True

    def cancel(self) -> bool:
        """Discard the draft and close the edit view."""
        self.session = None
        self.nav.pop()
        return True
