"""Interactive debug session CLI implementation."""

import argparse
import logging
import sys

from dbgtrack import __version__
from dbgtrack.cli.shared import configure_logging
from dbgtrack.config import default_log_file, load_config
from dbgtrack.session import session_loop

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the default run mode."""
    parser = argparse.ArgumentParser(
        prog="dbgtrack",
        description="Run a Lua script under debugger.lua and follow its stop locations",
        epilog="Other commands: 'dbgtrack scan' and 'dbgtrack configure'.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-file",
        help="Write log output to this file (default ~/.dbgtrack/session.log)",
    )
    parser.add_argument(
        "--no-source",
        action="store_true",
        help="Do not print source lines when the debugger stops",
    )
    parser.add_argument(
        "-C",
        "--context-lines",
        type=int,
        metavar="N",
        help="Source lines to show above and below the current line",
    )
    parser.add_argument("script", help="Lua script to run")
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed through to the script",
    )
    return parser


def run(argv: list[str]) -> int:
    """Execute a debug session."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.context_lines is not None and args.context_lines < 0:
        parser.error("--context-lines must not be negative")

    # The session owns the terminal in raw mode, so logs never go to stderr.
    log_file = args.log_file
    if not log_file:
        try:
            log_file = str(default_log_file())
        except OSError as e:
            print(f"Error: could not create log directory: {e}", file=sys.stderr)
            return 1
    configure_logging(args.debug, log_file)

    config = load_config()
    if args.no_source:
        config.show_source = False
    if args.context_lines is not None:
        config.context_lines = args.context_lines
    log.debug("config=%s", config.model_dump())

    return session_loop(args.script, args.args, config)
