"""Handler for 'tiki init'."""

from tiki.cli._common import error, output_json
from tiki.config import Paths
from tiki.errors import TikiError
from tiki.project import init_project


def init_command(args) -> int:
    """Create .doc/tiki and .doc/doki with starter content."""
    paths = Paths.for_project(args.project)
    try:
        result = init_project(paths)
    except TikiError as e:
        error(str(e), args.json)

    files = [str(p.relative_to(paths.project_root)) for p in result.files]
    if args.json:
        output_json(
            {
                "project": str(paths.project_root),
                "created": result.created,
                "git_initialized": result.git_initialized,
                "files": files,
            }
        )
        return 0

    if not result.created:
        print(f"Project already initialized at {paths.project_root}")
        return 0
    if result.git_initialized:
        print(f"Initialized git repository at {paths.project_root}")
    print(f"Initialized tiki project at {paths.project_root}")
    for f in files:
        print(f"  {f}")
    return 0
