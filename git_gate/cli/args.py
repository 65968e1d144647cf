"""Command-line argument parsing for git-gate."""

import argparse
from typing import List, Optional

from git_gate.__version__ import __version__

COMMANDS = ("c", "b", "m")


def build_parser() -> argparse.ArgumentParser:
    """Build the parser; help is handled by the caller so usage text stays in one place."""
    parser = argparse.ArgumentParser(prog="g", add_help=False)
    parser.add_argument("-h", "--help", action="store_true", help="Show usage")
    parser.add_argument("--version", action="version", version=f"git-gate {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("command", nargs="?", help="c, b or m")
    parser.add_argument("args", nargs="*", help="Command arguments")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Unrecognized options are kept in `unknown` instead of aborting, so the
    caller can answer with the usage text and exit status 1.
    """
    parsed, unknown = build_parser().parse_known_args(argv)
    parsed.unknown = unknown
    return parsed
