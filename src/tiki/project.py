"""Project scaffolding for ``tiki init`` and the first-run prompt."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tiki.config import Paths
from tiki.errors import IOFailure, VcsUnavailable
from tiki.git import GitVcs, init_repo, is_git_repo
from tiki.parser import serialize_ticket
from tiki.task import IN_PROGRESS, STORY, Ticket, generate_id

logger = logging.getLogger(__name__)

INDEX_MD = """\
# Project documentation

Documents in this directory are shown by the Docs view (F2).
Link other pages with relative links, for example [tickets](tickets.md).
"""

TICKETS_MD = """\
# Working with tickets

Every ticket is a markdown file in `.doc/tiki` with a YAML front-matter
block. Edit them here or in the board, and commit them with the rest of
your changes.

[Back to index](index.md)
"""

SAMPLE_DESCRIPTION = """\
Welcome to tiki. This ticket lives in `.doc/tiki` as a markdown file.

- Shift+Right moves it to the next lane
- Enter opens it, `e` edits it
- `n` creates a new ticket
"""


@dataclass
class InitResult:
    created: bool
    git_initialized: bool = False
    files: list[Path] = field(default_factory=list)


def init_project(paths: Paths) -> InitResult:
    """Create the ticket and document directories with starter content.

    Does nothing when the ticket directory already exists. A git
    repository is created when the project root is not inside one, and
    the starter files are staged.
    """
    if paths.is_initialized():
        return InitResult(created=False)

    result = InitResult(created=True)
    if not is_git_repo(paths.project_root):
        init_repo(paths.project_root)
        result.git_initialized = True

    sample = Ticket(
        id=generate_id(),
        title="Try out tiki",
        description=SAMPLE_DESCRIPTION,
        type=STORY,
        status=IN_PROGRESS,
        tags=["welcome"],
        priority=3,
        points=1,
    )
    files = {
        paths.task_dir / sample.filename: serialize_ticket(sample),
        paths.doki_dir / "index.md": INDEX_MD,
        paths.doki_dir / "tickets.md": TICKETS_MD,
    }
    try:
        for path, content in files.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            result.files.append(path)
    except OSError as e:
        raise IOFailure(f"cannot initialize {paths.project_root}: {e}") from e

    try:
        vcs = GitVcs(paths.project_root)
        for path in result.files:
            vcs.add(path)
    except VcsUnavailable as e:
        logger.warning("could not stage starter files: %s", e)
    logger.info("initialized tiki project in %s", paths.project_root)
    return result
