"""Configuration, project paths and workflow-file persistence."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from tiki.errors import IOFailure
from tiki.plugin.definition import Plugin
from tiki.plugin.loader import WORKFLOW_KEY

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
WORKFLOW_FILENAME = "workflow.yaml"
ENV_PREFIX = "TIKI"

DEFAULTS: dict[str, Any] = {
    "logging.level": "error",
    "header.visible": True,
    "tiki.maxPoints": 10,
    "appearance.theme": "auto",
    "appearance.gradientThreshold": 256,
}

THEMES = {
    "auto": "textual-dark",
    "dark": "textual-dark",
    "light": "textual-light",
}


def _env_name(key: str) -> str:
    """``tiki.maxPoints`` -> ``TIKI_TIKI_MAXPOINTS``."""
    return f"{ENV_PREFIX}_{key.replace('.', '_').upper()}"


def _coerce(key: str, raw: Any) -> Any:
    """Type-coerce a raw value using the type of its default."""
    default = DEFAULTS[key]
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).lower() in ("true", "yes", "1")
    if isinstance(default, int):
        return int(raw)
    return str(raw)


def _user_config_dir(environ: Mapping[str, str]) -> Path:
    if environ.get("TIKI_CONFIG_DIR"):
        return Path(environ["TIKI_CONFIG_DIR"])
    if environ.get("XDG_CONFIG_HOME"):
        return Path(environ["XDG_CONFIG_HOME"]) / "tiki"
    return Path.home() / ".config" / "tiki"


def _user_cache_dir(environ: Mapping[str, str]) -> Path:
    if environ.get("XDG_CACHE_HOME"):
        return Path(environ["XDG_CACHE_HOME"]) / "tiki"
    return Path.home() / ".cache" / "tiki"


@dataclass(frozen=True)
class Paths:
    """Every filesystem location tiki reads or writes."""

    project_root: Path
    user_config_dir: Path
    cache_dir: Path
    cwd: Path
    project_config_dir: Path

    @classmethod
    def for_project(cls, project_root: str | Path, environ: Mapping[str, str] | None = None) -> Paths:
        environ = os.environ if environ is None else environ
        root = Path(project_root).resolve()
        project_config = Path(environ["TIKI_PROJECT_DIR"]) if environ.get("TIKI_PROJECT_DIR") else root / ".doc"
        return cls(
            project_root=root,
            user_config_dir=_user_config_dir(environ),
            cache_dir=_user_cache_dir(environ),
            cwd=Path.cwd(),
            project_config_dir=project_config,
        )

    @property
    def task_dir(self) -> Path:
        return self.project_root / ".doc" / "tiki"

    @property
    def doki_dir(self) -> Path:
        return self.project_root / ".doc" / "doki"

    @property
    def template_file(self) -> Path:
        return self.user_config_dir / "new.md"

    @property
    def log_file(self) -> Path:
        return self.cache_dir / "tiki.log"

    @property
    def default_workflow_file(self) -> Path:
        return self.project_config_dir / WORKFLOW_FILENAME

    def config_files(self) -> list[Path]:
        """Config file candidates, most specific first."""
        return _unique(
            [
                self.project_config_dir / CONFIG_FILENAME,
                self.user_config_dir / CONFIG_FILENAME,
                self.cwd / CONFIG_FILENAME,
            ]
        )

    def workflow_files(self) -> list[Path]:
        """Workflow files in overlay order: user config is the base, later files override."""
        return _unique(
            [
                self.user_config_dir / WORKFLOW_FILENAME,
                self.default_workflow_file,
                self.cwd / WORKFLOW_FILENAME,
            ]
        )

    def is_initialized(self) -> bool:
        return self.task_dir.is_dir()


def _unique(paths: list[Path]) -> list[Path]:
    seen, result = set(), []
    for p in paths:
        key = p.resolve() if p.exists() else p
        if key not in seen:
            seen.add(key)
            result.append(p)
    return result


@dataclass
class Config:
    log_level: str = DEFAULTS["logging.level"]
    header_visible: bool = DEFAULTS["header.visible"]
    max_points: int = DEFAULTS["tiki.maxPoints"]
    theme: str = DEFAULTS["appearance.theme"]
    gradient_threshold: int = DEFAULTS["appearance.gradientThreshold"]
    source: Path | None = field(default=None, compare=False)

    @property
    def textual_theme(self) -> str:
        return THEMES.get(self.theme, THEMES["auto"])


def _lookup(data: dict, key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def load_config(paths: Paths, environ: Mapping[str, str] | None = None) -> Config:
    """Read the first config.yaml found, then apply TIKI_* environment overrides."""
    environ = os.environ if environ is None else environ
    data: dict = {}
    source = None
    for candidate in paths.config_files():
        if not candidate.is_file():
            continue
        try:
            loaded = yaml.safe_load(candidate.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            logger.warning("ignoring config file %s: %s", candidate, e)
            continue
        if isinstance(loaded, dict):
            data, source = loaded, candidate
            break
        logger.warning("ignoring config file %s: not a mapping", candidate)

    values = dict(DEFAULTS)
    for key in DEFAULTS:
        raw = environ.get(_env_name(key))
        if raw is None:
            raw = _lookup(data, key)
        if raw is None:
            continue
        try:
            values[key] = _coerce(key, raw)
        except (TypeError, ValueError):
            logger.warning("invalid value %r for %s, using %r", raw, key, DEFAULTS[key])

    config = Config(
        log_level=values["logging.level"],
        header_visible=values["header.visible"],
        max_points=values["tiki.maxPoints"],
        theme=values["appearance.theme"],
        gradient_threshold=values["appearance.gradientThreshold"],
        source=source,
    )
    if config.max_points < 1:
        logger.warning("tiki.maxPoints must be positive, using %d", DEFAULTS["tiki.maxPoints"])
        config.max_points = DEFAULTS["tiki.maxPoints"]
    if config.theme not in THEMES:
        logger.warning("unknown theme %s, using auto", config.theme)
        config.theme = "auto"
    return config


def setup_logging(level: str, log_file: Path | None) -> None:
    """Send log records to a file; the terminal belongs to the TUI."""
    numeric = getattr(logging, str(level).upper(), logging.ERROR)
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            logging.basicConfig(filename=str(log_file), level=numeric, format=fmt)
            return
        except OSError:
            pass
    logging.basicConfig(level=numeric, format=fmt, handlers=[logging.NullHandler()])


# --- Workflow persistence ---


def _workflow_target(plugin: Plugin, paths: Paths) -> Path:
    if plugin.config_index >= 0 and plugin.source not in ("", "embedded"):
        return Path(plugin.source)
    existing = [p for p in paths.workflow_files() if p.is_file()]
    return existing[-1] if existing else paths.default_workflow_file


def save_plugin_view_mode(plugin: Plugin, view_mode: str, paths: Paths) -> Path:
    """Persist a plugin's view mode with a read-modify-write of its workflow file.

    The entry is found by index, then by name; otherwise a new name-only
    entry is appended. Returns the file written.
    """
    path = _workflow_target(plugin, paths)
    data: dict = {WORKFLOW_KEY: []}
    if path.is_file():
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise IOFailure(f"cannot update {path}: {e}") from e
        if raw is not None:
            if not isinstance(raw, dict) or not isinstance(raw.get(WORKFLOW_KEY) or [], list):
                raise IOFailure(f"cannot update {path}: not a workflow file")
            data = raw
            data[WORKFLOW_KEY] = data.get(WORKFLOW_KEY) or []

    entries = data[WORKFLOW_KEY]
    target = None
    index = plugin.config_index
    if 0 <= index < len(entries) and isinstance(entries[index], dict):
        target = entries[index]
    else:
        for entry in entries:
            if isinstance(entry, dict) and entry.get("name") == plugin.name:
                target = entry
                break
    if target is None:
        target = {"name": plugin.name}
        entries.append(target)
    target["view"] = view_mode

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True), encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"cannot write {path}: {e}") from e
    logger.info("saved view mode %s for %s in %s", view_mode, plugin.name, path)
    return path
