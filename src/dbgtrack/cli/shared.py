"""Helpers shared by the dbgtrack subcommands."""

import logging

from dbgtrack.constants import BOLD, CYAN, RESET
from dbgtrack.scanner import Location
from dbgtrack.terminal import supports_color

LOG_FORMAT = "%(name)s %(levelname)s: %(message)s"


def configure_logging(debug: bool, log_file: str | None = None) -> None:
    """Set up root logging for a CLI invocation."""
    kwargs: dict[str, object] = {
        "level": logging.DEBUG if debug else logging.WARNING,
        "format": LOG_FORMAT,
    }
    if log_file:
        kwargs["filename"] = log_file
    logging.basicConfig(**kwargs)


def format_location(location: Location) -> str:
    """Return ``path:line``, highlighted when the terminal allows it."""
    text = f"{location.path}:{location.line}"
    if supports_color():
        return f"{BOLD}{CYAN}{text}{RESET}"
    return text
