"""Key bindings: actions, registries and the default registries per view."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce

from tiki.keys import RUNE, KeyEvent, Mod, format_key

# global
BACK = "back"
QUIT = "quit"
REFRESH = "refresh"
TOGGLE_HEADER = "toggle_header"

# plugin board
NAV_UP = "nav_up"
NAV_DOWN = "nav_down"
NAV_LEFT = "nav_left"
NAV_RIGHT = "nav_right"
NEXT_LANE = "next_lane"
PREV_LANE = "prev_lane"
OPEN_TASK = "open_task"
MOVE_LEFT = "move_task_left"
MOVE_RIGHT = "move_task_right"
NEW_TASK = "new_task"
DELETE_TASK = "delete_task"
SEARCH = "search"
TOGGLE_VIEW_MODE = "toggle_view_mode"

# ticket detail
EDIT_TASK = "edit_task"
FULLSCREEN = "fullscreen"

# ticket edit
SAVE_TASK = "save_task"
QUICK_SAVE = "quick_save"
NEXT_FIELD = "next_field"
PREV_FIELD = "prev_field"
NEXT_VALUE = "next_value"
PREV_VALUE = "prev_value"

# doki
NAVIGATE_BACK = "navigate_back"
NAVIGATE_FORWARD = "navigate_forward"
NEXT_LINK = "next_link"
PREV_LINK = "prev_link"
FOLLOW_LINK = "follow_link"

PLUGIN_PREFIX = "plugin:"
SHORTCUT_PREFIX = "shortcut:"


def plugin_action_id(plugin_name: str) -> str:
    return PLUGIN_PREFIX + plugin_name


def plugin_name_from_action(action_id: str) -> str:
    """Plugin name for a plugin activation action, "" for anything else."""
    if action_id.startswith(PLUGIN_PREFIX):
        return action_id[len(PLUGIN_PREFIX) :]
    return ""


@dataclass(frozen=True)
class Action:
    id: str
    key: str
    rune: str = ""
    modifiers: Mod = Mod.NONE
    label: str = ""
    show_in_header: bool = False

    @property
    def binding(self) -> tuple[str, str, Mod]:
        if self.key == RUNE:
            return RUNE, self.rune, self.modifiers
        return self.key, "", self.modifiers

    @property
    def key_display(self) -> str:
        return format_key(self.key, self.rune, self.modifiers)


def rune_action(action_id: str, rune: str, label: str = "", show: bool = True) -> Action:
    return Action(action_id, RUNE, rune, Mod.NONE, label, show)


def key_action(action_id: str, key: str, label: str = "", show: bool = True, modifiers: Mod = Mod.NONE) -> Action:
    return Action(action_id, key, "", modifiers, label, show)


class ActionRegistry:
    """Ordered actions with key and rune lookup tables.

    Registering a second action on an occupied binding replaces the
    first one in place, so header order follows first appearance.
    """

    def __init__(self, actions: list[Action] | None = None):
        self._actions: list[Action] = []
        self._by_key: dict[tuple[str, Mod], Action] = {}
        self._by_rune: dict[tuple[str, Mod], Action] = {}
        for action in actions or []:
            self.register(action)

    def register(self, action: Action) -> None:
        key, rune, modifiers = action.binding
        table, slot = (self._by_rune, (rune, modifiers)) if key == RUNE else (self._by_key, (key, modifiers))
        existing = table.get(slot)
        if existing is not None:
            self._actions[self._actions.index(existing)] = action
        else:
            self._actions.append(action)
        table[slot] = action

    def merge(self, other: ActionRegistry) -> ActionRegistry:
        """New registry with other's bindings overriding ours."""
        merged = ActionRegistry(self._actions)
        for action in other._actions:
            merged.register(action)
        return merged

    def match(self, event: KeyEvent) -> Action | None:
        """Exact key+modifier match; printable keys use the rune table."""
        if event.key == RUNE:
            return self._by_rune.get((event.rune, event.modifiers))
        return self._by_key.get((event.key, event.modifiers))

    def actions(self) -> list[Action]:
        return list(self._actions)

    def header_actions(self) -> list[Action]:
        return [a for a in self._actions if a.show_in_header]

    def find(self, action_id: str) -> Action | None:
        for action in self._actions:
            if action.id == action_id:
                return action
        return None

    def __len__(self) -> int:
        return len(self._actions)


def compose(*registries: ActionRegistry) -> ActionRegistry:
    """Merge left to right; the rightmost registry wins conflicts."""
    return reduce(lambda a, b: a.merge(b), registries, ActionRegistry())


# --- Default registries ---


def global_actions() -> ActionRegistry:
    return ActionRegistry(
        [
            key_action(BACK, "escape", "Back"),
            rune_action(QUIT, "q", "Quit"),
            rune_action(REFRESH, "r", "Refresh"),
            key_action(TOGGLE_HEADER, "f10", "Header"),
        ]
    )


def plugin_activation_actions(plugins) -> ActionRegistry:
    """One action per plugin with an activation key, id ``plugin:<name>``."""
    registry = ActionRegistry()
    for plugin in plugins:
        if not plugin.has_key:
            continue
        registry.register(Action(plugin_action_id(plugin.name), plugin.key, plugin.rune, plugin.modifiers, plugin.name, True))
    return registry


def plugin_shortcut_actions(plugin) -> ActionRegistry:
    """A plugin's per-ticket shortcuts, id ``shortcut:<index>``."""
    registry = ActionRegistry()
    for i, shortcut in enumerate(plugin.actions):
        registry.register(
            Action(SHORTCUT_PREFIX + str(i), shortcut.key, shortcut.rune, shortcut.modifiers, shortcut.label, True)
        )
    return registry


def plugin_view_actions() -> ActionRegistry:
    return ActionRegistry(
        [
            key_action(NAV_UP, "up", "↑", show=False),
            key_action(NAV_DOWN, "down", "↓", show=False),
            key_action(NAV_LEFT, "left", "←", show=False),
            key_action(NAV_RIGHT, "right", "→", show=False),
            rune_action(NAV_UP, "k", "↑", show=False),
            rune_action(NAV_DOWN, "j", "↓", show=False),
            rune_action(NAV_LEFT, "h", "←", show=False),
            rune_action(NAV_RIGHT, "l", "→", show=False),
            key_action(NEXT_LANE, "tab", "Next lane", show=False),
            key_action(PREV_LANE, "tab", "Prev lane", show=False, modifiers=Mod.SHIFT),
            key_action(OPEN_TASK, "enter", "Open"),
            key_action(MOVE_LEFT, "left", "Move ←", modifiers=Mod.SHIFT),
            key_action(MOVE_RIGHT, "right", "Move →", modifiers=Mod.SHIFT),
            rune_action(NEW_TASK, "n", "New"),
            rune_action(DELETE_TASK, "d", "Delete"),
            rune_action(SEARCH, "/", "Search"),
            rune_action(TOGGLE_VIEW_MODE, "v", "View mode"),
        ]
    )


def task_detail_actions() -> ActionRegistry:
    return ActionRegistry(
        [
            rune_action(EDIT_TASK, "e", "Edit"),
            rune_action(FULLSCREEN, "f", "Full screen"),
        ]
    )


def doki_view_actions() -> ActionRegistry:
    return ActionRegistry(
        [
            key_action(NAVIGATE_BACK, "left", "← Back"),
            key_action(NAVIGATE_FORWARD, "right", "Forward →"),
            key_action(NEXT_LINK, "tab", "Next link", show=False),
            key_action(PREV_LINK, "tab", "Prev link", show=False, modifiers=Mod.SHIFT),
            key_action(FOLLOW_LINK, "enter", "Follow"),
        ]
    )


# --- Edit view, derived from the focused field ---

TEXT_FIELDS = ("title", "assignee", "description")
ENUM_FIELDS = ("status", "type", "priority", "assignee", "points")


def _field_navigation() -> list[Action]:
    return [
        key_action(NEXT_FIELD, "tab", "Next field"),
        key_action(PREV_FIELD, "tab", "Prev field", modifiers=Mod.SHIFT),
    ]


def edit_field_actions(field: str) -> ActionRegistry:
    """Registry for the edit view when ``field`` has focus."""
    actions = [key_action(SAVE_TASK, "s", "Save", modifiers=Mod.CTRL)]
    if field == "title":
        actions.append(key_action(QUICK_SAVE, "enter", "Quick save"))
        actions.append(key_action(QUICK_SAVE, "enter", "Quick save", show=False, modifiers=Mod.CTRL))
    if field in ENUM_FIELDS:
        actions.append(key_action(NEXT_VALUE, "down", "Next ↓"))
        actions.append(key_action(PREV_VALUE, "up", "Prev ↑"))
    actions.extend(_field_navigation())
    return ActionRegistry(actions)
