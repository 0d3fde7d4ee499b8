"""Plugin descriptors and workflow loading."""

from tiki.plugin.definition import COMPACT, DOKI, EXPANDED, TIKI, Lane, Plugin, ShortcutAction
from tiki.plugin.loader import build_plugin, load_plugins, read_workflow_entries

__all__ = [
    "COMPACT",
    "DOKI",
    "EXPANDED",
    "TIKI",
    "Lane",
    "Plugin",
    "ShortcutAction",
    "build_plugin",
    "load_plugins",
    "read_workflow_entries",
]
