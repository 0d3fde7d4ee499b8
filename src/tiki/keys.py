"""Key events, modifier masks and human key specs like ``Ctrl-R``."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from tiki.errors import InvalidWorkflow

RUNE = "rune"


class Mod(enum.IntFlag):
    NONE = 0
    SHIFT = 1
    CTRL = 2
    ALT = 4


_MODIFIER_NAMES = {
    "shift": Mod.SHIFT,
    "ctrl": Mod.CTRL,
    "control": Mod.CTRL,
    "alt": Mod.ALT,
    "meta": Mod.ALT,
    "option": Mod.ALT,
}

_NAMED_KEYS = {
    "enter": "enter",
    "return": "enter",
    "esc": "escape",
    "escape": "escape",
    "tab": "tab",
    "backtab": "tab",
    "space": "space",
    "backspace": "backspace",
    "delete": "delete",
    "del": "delete",
    "insert": "insert",
    "home": "home",
    "end": "end",
    "pgup": "pageup",
    "pageup": "pageup",
    "pgdn": "pagedown",
    "pagedown": "pagedown",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
}

_ARROWS = {"up": "↑", "down": "↓", "left": "←", "right": "→"}


@dataclass(frozen=True)
class KeyEvent:
    """A key press: either a named key with modifiers or a printable rune."""

    key: str
    rune: str = ""
    modifiers: Mod = Mod.NONE

    @classmethod
    def char(cls, rune: str) -> KeyEvent:
        return cls(RUNE, rune)

    @property
    def is_rune(self) -> bool:
        return self.key == RUNE


def parse_key_spec(spec: str) -> tuple[str, str, Mod]:
    """Parse ``Ctrl-R``, ``F3``, ``Alt-M``, ``Shift-Tab`` or ``/`` into (key, rune, modifiers)."""
    if not isinstance(spec, str) or not spec:
        raise InvalidWorkflow(f"invalid key {spec!r}", "key")
    if len(spec) == 1:
        return RUNE, spec, Mod.NONE

    parts = spec.replace("+", "-").split("-")
    if "" in parts:
        raise InvalidWorkflow(f"invalid key {spec!r}", "key")
    *modifier_names, name = parts
    modifiers = Mod.NONE
    for m in modifier_names:
        if m.lower() not in _MODIFIER_NAMES:
            raise InvalidWorkflow(f"unknown modifier {m!r} in {spec!r}", "key")
        modifiers |= _MODIFIER_NAMES[m.lower()]

    lowered = name.lower()
    if lowered == "backtab":
        return "tab", "", modifiers | Mod.SHIFT
    if lowered in _NAMED_KEYS:
        return _NAMED_KEYS[lowered], "", modifiers
    if lowered.startswith("f") and lowered[1:].isdigit() and 1 <= int(lowered[1:]) <= 24:
        return lowered, "", modifiers
    if len(name) == 1:
        if modifiers & (Mod.CTRL | Mod.ALT):
            return lowered, "", modifiers
        return RUNE, name, Mod.NONE
    raise InvalidWorkflow(f"unknown key {spec!r}", "key")


def format_key(key: str, rune: str = "", modifiers: Mod = Mod.NONE) -> str:
    """Short display form, e.g. ``Ctrl-S``, ``F10``, ``Shift-→``, ``q``."""
    if key == RUNE:
        return "Space" if rune == " " else rune
    if key in _ARROWS:
        name = _ARROWS[key]
    elif key == "escape":
        name = "Esc"
    elif key.startswith("f") and key[1:].isdigit():
        name = key.upper()
    elif len(key) == 1:
        name = key.upper()
    else:
        name = key.capitalize()
    prefix = "".join(
        label
        for flag, label in ((Mod.CTRL, "Ctrl-"), (Mod.ALT, "Alt-"), (Mod.SHIFT, "Shift-"))
        if modifiers & flag
    )
    return prefix + name


def from_textual(key: str, character: str | None) -> KeyEvent:
    """Translate a Textual key name and character into a KeyEvent."""
    *modifier_names, name = key.split("+") if key != "+" else ["+"]
    modifiers = Mod.NONE
    for m in modifier_names:
        modifiers |= _MODIFIER_NAMES.get(m, Mod.NONE)

    if character and len(character) == 1 and character.isprintable() and not modifiers & (Mod.CTRL | Mod.ALT):
        return KeyEvent(RUNE, character)
    if name == "backtab":
        return KeyEvent("tab", "", modifiers | Mod.SHIFT)
    return KeyEvent(name, "", modifiers)
