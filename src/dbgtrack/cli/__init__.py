"""Command-line interface for dbgtrack."""

import sys

from dbgtrack.cli import configure, run, scan

SUBCOMMANDS = {
    "configure": configure.run,
    "scan": scan.run,
}


def main(argv: list[str] | None = None) -> int:
    """Dispatch to a subcommand, or start a debug session by default."""
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in SUBCOMMANDS:
        return SUBCOMMANDS[args[0]](args[1:])
    return run.run(args)


def entrypoint() -> None:
    raise SystemExit(main())
