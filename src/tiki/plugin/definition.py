"""Plugin, lane and shortcut descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field

from tiki.filter import Filter, TrueFilter
from tiki.keys import Mod, RUNE, format_key
from tiki.plugin.lane_actions import LaneAction
from tiki.sort import DEFAULT_SORT, SortRule

TIKI = "tiki"
DOKI = "doki"
PLUGIN_TYPES = (TIKI, DOKI)

COMPACT = "compact"
EXPANDED = "expanded"
VIEW_MODES = (COMPACT, EXPANDED)

FETCHER_FILE = "file"
FETCHER_INTERNAL = "internal"

EMBEDDED_INDEX = -1


@dataclass(frozen=True)
class Lane:
    name: str
    columns: int = 1
    filter: Filter = field(default_factory=TrueFilter)
    action: LaneAction | None = None
    filter_source: str = ""


@dataclass(frozen=True)
class ShortcutAction:
    """A per-ticket shortcut declared by a plugin."""

    key: str
    rune: str
    modifiers: Mod
    label: str
    action: LaneAction

    @property
    def key_display(self) -> str:
        return format_key(self.key, self.rune, self.modifiers)


@dataclass(frozen=True)
class Plugin:
    """Immutable description of one view."""

    name: str
    type: str = TIKI
    key: str = ""
    rune: str = ""
    modifiers: Mod = Mod.NONE
    source: str = "embedded"
    config_index: int = EMBEDDED_INDEX
    default: bool = False
    lanes: tuple[Lane, ...] = ()
    sort: tuple[SortRule, ...] = DEFAULT_SORT
    view_mode: str = EXPANDED
    actions: tuple[ShortcutAction, ...] = ()
    fetcher: str = ""
    url: str = ""
    text: str = ""

    @property
    def has_key(self) -> bool:
        return bool(self.key) and (self.key != RUNE or bool(self.rune))

    @property
    def key_binding(self) -> tuple[str, str, Mod]:
        return self.key, self.rune, self.modifiers

    @property
    def key_display(self) -> str:
        return format_key(self.key, self.rune, self.modifiers) if self.has_key else ""
