"""Terminal presentation for a debug session."""

from dbgtrack.constants import BOLD, CYAN, RESET
from dbgtrack.scanner import Location
from dbgtrack.source import SourceLine, format_source_context
from dbgtrack.terminal import supports_color


def status_line(script: str) -> bytes:
    """Return the banner shown when a session starts."""
    message = f"dbgtrack: debugging {script} (Ctrl-D to exit)\r\n"
    if supports_color():
        return f"{BOLD}{CYAN}{message}{RESET}".encode()
    return message.encode()


def location_banner(location: Location, lines: list[SourceLine] | None) -> str:
    """Return the block written after the debugger reports a new location."""
    use_color = supports_color()
    header = f"-- {location.path}:{location.line} --"
    if use_color:
        header = f"{BOLD}{CYAN}{header}{RESET}"
    body = format_source_context(lines, use_color) if lines else ""
    return f"\r\n{header}\r\n{body}"


def trailing_partial_line(text: str) -> str:
    """Return the text after the last newline (an unterminated prompt, say)."""
    return text.rsplit("\n", 1)[-1]
