"""Shared helpers for CLI command handlers."""

import json
import sys
from importlib.metadata import PackageNotFoundError, version


def package_version(name: str = "tiki") -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "unknown"


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output a result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool = False) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
