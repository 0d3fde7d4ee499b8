"""CLI argument parsers for tiki."""

import argparse

from tiki.cli._common import package_version
from tiki.cli.init import init_command
from tiki.cli.sysinfo import sysinfo

LOG_LEVELS = ("debug", "info", "warning", "error")


def _common() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--project", default=".", help="Project root (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    return common


def build_parser() -> argparse.ArgumentParser:
    """Parser for the subcommands."""
    common = _common()
    parser = argparse.ArgumentParser(prog="tiki", description="Markdown issue tracker", parents=[common])
    parser.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")

    nouns = parser.add_subparsers(dest="noun")

    init_p = nouns.add_parser("init", help="Create the ticket and document directories", parents=[common])
    init_p.set_defaults(func=init_command)

    sysinfo_p = nouns.add_parser("sysinfo", help="Show versions, paths and project state", parents=[common])
    sysinfo_p.set_defaults(func=sysinfo)

    return parser


def build_tui_parser() -> argparse.ArgumentParser:
    """Parser for the board UI and the markdown viewer."""
    parser = argparse.ArgumentParser(
        prog="tiki",
        description="Markdown issue tracker. Subcommands: init, sysinfo.",
    )
    parser.add_argument("target", nargs="?", help="Markdown file or URL to view instead of the board")
    parser.add_argument("--project", default=".", help="Project root (default: .)")
    parser.add_argument("--plugin", help="View to open first (default: the workflow's default)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Log level (default: from config)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")
    return parser
