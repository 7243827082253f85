"""`dbgtrack scan` command implementation."""

import argparse
import logging
import sys
from typing import TextIO

from dbgtrack.cli.shared import configure_logging, format_location
from dbgtrack.config import load_config
from dbgtrack.scanner import Location, MarkerScanner

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the scan command."""
    parser = argparse.ArgumentParser(
        prog="dbgtrack scan",
        description="Scan a saved debugger transcript for stop locations",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        metavar="N",
        help=f"Characters fed to the scanner per read (default {DEFAULT_CHUNK_SIZE})",
    )
    parser.add_argument(
        "--locations",
        action="store_true",
        help="Print one path:line per recognized marker instead of the transcript",
    )
    parser.add_argument(
        "transcript",
        nargs="?",
        default="-",
        help="Transcript file to read, or '-' for stdin (default)",
    )
    return parser


def scan_stream(
    stream: TextIO,
    out: TextIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    locations_only: bool = False,
    max_pending: int | None = None,
) -> list[Location]:
    """Feed *stream* through a scanner and write the results to *out*.

    Returns:
        Every recognized location, in transcript order.
    """
    found: list[Location] = []

    def _on_location(location: Location) -> None:
        found.append(location)
        if locations_only:
            out.write(format_location(location) + "\n")

    scanner = MarkerScanner(listener=_on_location, max_pending=max_pending)
    while chunk := stream.read(chunk_size):
        text = scanner.feed(chunk)
        if not locations_only:
            out.write(text)
    tail = scanner.flush()
    if not locations_only:
        out.write(tail)
    log.debug("scanned transcript: %d locations", len(found))
    return found


def run(argv: list[str]) -> int:
    """Execute the scan command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.chunk_size < 1:
        parser.error("--chunk-size must be a positive integer")

    configure_logging(args.debug)
    config = load_config()

    try:
        if args.transcript == "-":
            found = scan_stream(
                sys.stdin,
                sys.stdout,
                chunk_size=args.chunk_size,
                locations_only=args.locations,
                max_pending=config.max_pending_chars,
            )
        else:
            with open(args.transcript, encoding="utf-8", errors="replace", newline="") as f:
                found = scan_stream(
                    f,
                    sys.stdout,
                    chunk_size=args.chunk_size,
                    locations_only=args.locations,
                    max_pending=config.max_pending_chars,
                )
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not found:
        log.info("no debugger locations found")
    return 0
