"""`dbgtrack configure` command implementation."""

import argparse
import sys

from dbgtrack.cli.shared import configure_logging
from dbgtrack.config import load_config, save_config
from dbgtrack.models import DbgtrackConfig


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the configure command."""
    parser = argparse.ArgumentParser(
        prog="dbgtrack configure",
        description="Configure the Lua interpreter, debugger location and display options",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--lua", help="Lua interpreter to run scripts with (example: luajit)")
    parser.add_argument(
        "--debugger-path",
        help="Directory containing debugger.lua, added to LUA_PATH for the script",
    )
    parser.add_argument(
        "--clear-debugger-path",
        action="store_true",
        help="Remove the stored debugger.lua directory",
    )
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "--show-source",
        action="store_true",
        help="Print source lines when the debugger stops",
    )
    source_group.add_argument(
        "--hide-source",
        action="store_true",
        help="Do not print source lines when the debugger stops",
    )
    parser.add_argument(
        "--context-lines",
        type=int,
        metavar="N",
        help="Source lines to show above and below the current line",
    )
    pending_group = parser.add_mutually_exclusive_group()
    pending_group.add_argument(
        "--max-pending",
        type=int,
        metavar="N",
        help="Characters held back waiting for a marker line to complete",
    )
    pending_group.add_argument(
        "--unbounded-pending",
        action="store_true",
        help="Never release held-back text before its line completes",
    )
    return parser


def apply_options(config: DbgtrackConfig, args: argparse.Namespace) -> DbgtrackConfig:
    """Return a copy of *config* with the command-line options applied.

    Raises:
        ValueError: If an option value is out of range.
    """
    updated = config.model_copy(deep=True)

    if args.lua is not None:
        if not args.lua.strip():
            raise ValueError("--lua must not be empty")
        updated.lua = args.lua.strip()

    if args.clear_debugger_path:
        updated.debugger_path = None
    elif args.debugger_path is not None:
        updated.debugger_path = args.debugger_path.strip() or None

    if args.show_source:
        updated.show_source = True
    if args.hide_source:
        updated.show_source = False

    if args.context_lines is not None:
        if args.context_lines < 0:
            raise ValueError("--context-lines must not be negative")
        updated.context_lines = args.context_lines

    if args.unbounded_pending:
        updated.max_pending_chars = None
    elif args.max_pending is not None:
        if args.max_pending < 1:
            raise ValueError("--max-pending must be a positive integer")
        updated.max_pending_chars = args.max_pending

    return updated


def run(argv: list[str]) -> int:
    """Execute the configure command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.debug)

    if args.clear_debugger_path and args.debugger_path is not None:
        print(
            "Error: --debugger-path and --clear-debugger-path cannot be used together",
            file=sys.stderr,
        )
        return 2

    try:
        updated = apply_options(load_config(), args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        save_config(updated)
    except OSError as e:
        print(f"Error: could not save configuration: {e}", file=sys.stderr)
        return 1

    max_pending = updated.max_pending_chars
    print("\nConfiguration saved to ~/.dbgtrack/config.json")
    print(f"  lua: {updated.lua}")
    print(f"  debugger_path: {updated.debugger_path or 'not set'}")
    print("  show_source: " + ("true" if updated.show_source else "false"))
    print(f"  context_lines: {updated.context_lines}")
    print(f"  max_pending_chars: {max_pending if max_pending is not None else 'unbounded'}")
    print("")
    return 0
