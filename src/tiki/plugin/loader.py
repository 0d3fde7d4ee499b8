"""Build plugins from embedded defaults and workflow files."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import yaml

from tiki.errors import InvalidWorkflow
from tiki.filter import parse_filter
from tiki.keys import Mod, parse_key_spec
from tiki.plugin.definition import (
    DOKI,
    EMBEDDED_INDEX,
    FETCHER_FILE,
    FETCHER_INTERNAL,
    PLUGIN_TYPES,
    TIKI,
    VIEW_MODES,
    EXPANDED,
    Lane,
    Plugin,
    ShortcutAction,
)
from tiki.plugin.embedded import EMBEDDED_WORKFLOW
from tiki.plugin.lane_actions import parse_action
from tiki.sort import parse_sort

logger = logging.getLogger(__name__)

WORKFLOW_KEY = "views"
MAX_LANES = 10


def read_workflow_entries(path: str | Path) -> list[dict]:
    """Plugin entries from one workflow file.

    Raises InvalidWorkflow when the file is not a mapping with a list of
    entries under ``views``.
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise InvalidWorkflow(f"malformed YAML: {e}", str(path)) from e
    if data is None:
        return []
    if not isinstance(data, dict):
        raise InvalidWorkflow("workflow file is not a mapping", str(path))
    entries = data.get(WORKFLOW_KEY) or []
    if not isinstance(entries, list):
        raise InvalidWorkflow(f"'{WORKFLOW_KEY}' is not a list", str(path))
    return entries


def _build_lanes(entry: dict, location: str) -> tuple[Lane, ...]:
    raw_lanes = entry.get("lanes")
    if not isinstance(raw_lanes, list) or not raw_lanes:
        raise InvalidWorkflow("a tiki plugin needs at least one lane", location)
    if len(raw_lanes) > MAX_LANES:
        raise InvalidWorkflow(f"at most {MAX_LANES} lanes are supported", location)

    lanes = []
    for i, raw in enumerate(raw_lanes):
        lane_location = f"{location}.lanes[{i}]"
        if not isinstance(raw, dict):
            raise InvalidWorkflow("lane must be a mapping", lane_location)
        name = str(raw.get("name") or "").strip()
        if not name:
            raise InvalidWorkflow("lane needs a name", lane_location)
        try:
            columns = int(raw.get("columns") or 1)
        except (TypeError, ValueError):
            raise InvalidWorkflow(f"columns must be a number, got {raw.get('columns')!r}", lane_location) from None
        source = raw.get("filter")
        try:
            lane_filter = parse_filter(source)
            action = parse_action(raw.get("action"))
        except InvalidWorkflow as e:
            raise InvalidWorkflow(e.message, f"{lane_location} {e.location}".strip()) from e
        lanes.append(
            Lane(
                name=name,
                columns=max(columns, 1),
                filter=lane_filter,
                action=action,
                filter_source="" if source is None else str(source),
            )
        )
    return tuple(lanes)


def _build_actions(entry: dict, location: str) -> tuple[ShortcutAction, ...]:
    raw_actions = entry.get("actions") or []
    if not isinstance(raw_actions, list):
        raise InvalidWorkflow("actions must be a list", location)
    actions = []
    for i, raw in enumerate(raw_actions):
        action_location = f"{location}.actions[{i}]"
        if not isinstance(raw, dict):
            raise InvalidWorkflow("action must be a mapping", action_location)
        try:
            key, rune, modifiers = parse_key_spec(str(raw.get("key") or ""))
            action = parse_action(raw.get("action"))
        except InvalidWorkflow as e:
            raise InvalidWorkflow(e.message, action_location) from e
        if action is None:
            raise InvalidWorkflow("action is empty", action_location)
        label = str(raw.get("label") or action.source)
        actions.append(ShortcutAction(key, rune, modifiers, label, action))
    return tuple(actions)


def build_plugin(entry: dict, source: str = "embedded", config_index: int = EMBEDDED_INDEX) -> Plugin:
    """Validate one merged workflow entry and turn it into a Plugin."""
    if not isinstance(entry, dict):
        raise InvalidWorkflow("plugin entry must be a mapping", source)
    name = str(entry.get("name") or "").strip()
    if not name:
        raise InvalidWorkflow("plugin needs a name", source)
    location = name

    plugin_type = str(entry.get("type") or TIKI).lower()
    if plugin_type not in PLUGIN_TYPES:
        raise InvalidWorkflow(f"unknown plugin type {plugin_type!r}", location)

    key, rune, modifiers = "", "", Mod.NONE
    if entry.get("key"):
        try:
            key, rune, modifiers = parse_key_spec(str(entry["key"]))
        except InvalidWorkflow as e:
            raise InvalidWorkflow(e.message, f"{location}.key") from e

    view_mode = str(entry.get("view") or EXPANDED).lower()
    if view_mode not in VIEW_MODES:
        raise InvalidWorkflow(f"unknown view mode {view_mode!r}", f"{location}.view")

    plugin = Plugin(
        name=name,
        type=plugin_type,
        key=key,
        rune=rune,
        modifiers=modifiers,
        source=source,
        config_index=config_index,
        default=bool(entry.get("default", False)),
        view_mode=view_mode,
    )

    if plugin_type == DOKI:
        fetcher = str(entry.get("fetcher") or "").lower()
        if fetcher == FETCHER_FILE:
            if not entry.get("url"):
                raise InvalidWorkflow("file fetcher needs a url", location)
        elif fetcher == FETCHER_INTERNAL:
            if not entry.get("text"):
                raise InvalidWorkflow("internal fetcher needs text", location)
        else:
            raise InvalidWorkflow(f"doki plugin needs fetcher 'file' or 'internal', got {fetcher!r}", location)
        return replace(plugin, fetcher=fetcher, url=str(entry.get("url") or ""), text=str(entry.get("text") or ""))

    try:
        sort = parse_sort(entry.get("sort"))
    except InvalidWorkflow as e:
        raise InvalidWorkflow(e.message, f"{location}.sort") from e
    return replace(
        plugin,
        lanes=_build_lanes(entry, location),
        sort=sort,
        actions=_build_actions(entry, location),
    )


def _merge_entries(sources: list[tuple[str, list[dict]]]) -> list[tuple[dict, str, int]]:
    """Overlay entries by name: later sources override fields of earlier ones."""
    merged: dict[str, tuple[dict, str, int]] = {}
    for source, entries in sources:
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not entry.get("name"):
                logger.warning("dropping unnamed plugin entry %d in %s", index, source)
                continue
            name = str(entry["name"]).strip()
            config_index = EMBEDDED_INDEX if source == "embedded" else index
            if name in merged:
                base, _, _ = merged[name]
                merged[name] = ({**base, **entry}, source, config_index)
            else:
                merged[name] = (dict(entry), source, config_index)
    return list(merged.values())


def _dedupe_keys(plugins: list[Plugin]) -> list[Plugin]:
    """Later plugins win duplicate activation keys; earlier ones are dropped."""
    owner: dict[tuple, int] = {}
    dropped: set[int] = set()
    for i, plugin in enumerate(plugins):
        if not plugin.has_key:
            continue
        binding = plugin.key_binding
        if binding in owner:
            earlier = owner[binding]
            logger.warning(
                "dropping plugin %s: activation key %s reused by %s",
                plugins[earlier].name,
                plugin.key_display,
                plugin.name,
            )
            dropped.add(earlier)
        owner[binding] = i
    return [p for i, p in enumerate(plugins) if i not in dropped]


def _pick_default(plugins: list[Plugin]) -> list[Plugin]:
    defaults = [p for p in plugins if p.default]
    if len(defaults) > 1:
        logger.warning("several default plugins, using %s", defaults[0].name)
    chosen = defaults[0] if defaults else (plugins[0] if plugins else None)
    return [replace(p, default=p is chosen) for p in plugins]


def load_plugins(workflow_files: list[Path] | None = None) -> list[Plugin]:
    """Embedded defaults overlaid with each existing workflow file, in order.

    A plugin that fails validation is dropped with a warning; the rest
    still load.
    """
    sources: list[tuple[str, list[dict]]] = [("embedded", yaml.safe_load(EMBEDDED_WORKFLOW)[WORKFLOW_KEY])]
    for path in workflow_files or []:
        if not Path(path).is_file():
            continue
        try:
            sources.append((str(path), read_workflow_entries(path)))
        except (InvalidWorkflow, OSError) as e:
            logger.warning("ignoring workflow file %s: %s", path, e)

    plugins = []
    for entry, source, config_index in _merge_entries(sources):
        try:
            plugins.append(build_plugin(entry, source, config_index))
        except InvalidWorkflow as e:
            logger.warning("dropping plugin %s from %s: %s", entry.get("name"), source, e)
    return _pick_default(_dedupe_keys(plugins))
