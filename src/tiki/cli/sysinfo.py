"""Handler for 'tiki sysinfo'."""

import platform
import sys

from tiki.cli._common import output_json, package_version
from tiki.config import Paths, load_config
from tiki.git import is_git_repo


def collect_sysinfo(paths: Paths) -> dict:
    config = load_config(paths)
    return {
        "tiki": package_version(),
        "python": sys.version.split()[0],
        "textual": package_version("textual"),
        "platform": platform.platform(),
        "project": str(paths.project_root),
        "initialized": paths.is_initialized(),
        "git_repo": is_git_repo(paths.project_root),
        "task_dir": str(paths.task_dir),
        "doki_dir": str(paths.doki_dir),
        "config_file": str(config.source) if config.source else None,
        "workflow_files": [str(p) for p in paths.workflow_files() if p.is_file()],
        "user_config_dir": str(paths.user_config_dir),
        "log_file": str(paths.log_file),
        "theme": config.theme,
        "max_points": config.max_points,
    }


def sysinfo(args) -> int:
    """Print versions, paths and project state."""
    info = collect_sysinfo(Paths.for_project(args.project))
    if args.json:
        output_json(info)
        return 0
    width = max(len(k) for k in info)
    for key, value in info.items():
        if isinstance(value, list):
            value = ", ".join(value) or "none"
        elif value is None:
            value = "none"
        print(f"{key:<{width}}  {value}")
    return 0
