"""Application context handed to controllers and views."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping

from tiki.config import Config, Paths, load_config
from tiki.errors import VcsUnavailable
from tiki.filter import FilterContext
from tiki.git import VersionControl, open_vcs
from tiki.plugin.definition import Plugin
from tiki.plugin.loader import load_plugins
from tiki.store import TikiStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AppContext:
    """Everything that would otherwise be process-wide state."""

    paths: Paths
    config: Config
    vcs: VersionControl
    store: TikiStore
    plugins: list[Plugin]
    clock: Callable[[], datetime] = utc_now
    _user: str | None = field(default=None, repr=False)

    @classmethod
    def create(cls, project_root: str | Path, environ: Mapping[str, str] | None = None) -> AppContext:
        """Resolve paths and config, open version control and build the (unloaded) store."""
        environ = os.environ if environ is None else environ
        paths = Paths.for_project(project_root, environ)
        config = load_config(paths, environ)
        vcs = open_vcs(paths.project_root)
        store = TikiStore(
            paths.task_dir,
            vcs=vcs,
            max_points=config.max_points,
            template_path=paths.template_file,
        )
        plugins = load_plugins(paths.workflow_files())
        return cls(paths=paths, config=config, vcs=vcs, store=store, plugins=plugins)

    @property
    def current_user(self) -> str:
        if self._user is None:
            try:
                self._user = self.vcs.current_user()[0]
            except VcsUnavailable:
                self._user = ""
        return self._user

    def filter_context(self) -> FilterContext:
        """Clock and user for filter evaluation, sampled once per call."""
        return FilterContext(now=self.clock(), current_user=self.current_user)

    def plugin(self, name: str) -> Plugin | None:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        return None

    @property
    def default_plugin(self) -> Plugin | None:
        for plugin in self.plugins:
            if plugin.default:
                return plugin
        return self.plugins[0] if self.plugins else None
