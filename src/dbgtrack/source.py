"""Source lines around the debugger's current location."""

import logging
from dataclasses import dataclass
from pathlib import Path

from dbgtrack.constants import BOLD, DIM, RESET, YELLOW
from dbgtrack.scanner import Location

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLine:
    """One numbered line of a source file."""

    number: int
    text: str
    current: bool = False


def resolve_source_path(path: str, base_dir: Path | None = None) -> Path | None:
    """Map a path as printed by the debugger to a file on disk.

    Lua chunk names may carry a leading ``@``; pseudo sources such as
    ``[C]`` or ``[string "..."]`` have no file and resolve to ``None``.
    """
    if path.startswith("@"):
        path = path[1:]
    if not path or path.startswith("["):
        return None
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = (base_dir or Path.cwd()) / candidate
    if not candidate.is_file():
        log.debug("source file %s not found", candidate)
        return None
    return candidate


def read_source_context(
    location: Location, context_lines: int = 3, base_dir: Path | None = None
) -> list[SourceLine] | None:
    """Return the lines around *location*, or ``None`` when unavailable.

    Args:
        location: Position announced by the debugger.
        context_lines: Lines to include above and below the current line.
        base_dir: Directory relative paths are resolved against (the
            debuggee's working directory); defaults to the current directory.

    Returns:
        Up to ``2 * context_lines + 1`` lines, clamped to the file, with the
        current line flagged. ``None`` when the file cannot be read or the
        line lies outside it.
    """
    source = resolve_source_path(location.path, base_dir)
    if source is None:
        return None
    try:
        lines = source.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        log.debug("reading %s failed: %s", source, e)
        return None

    if location.line > len(lines):
        log.debug("%s has %d lines, location points at %d", source, len(lines), location.line)
        return None

    first = max(1, location.line - context_lines)
    last = min(len(lines), location.line + context_lines)
    return [
        SourceLine(number, lines[number - 1], number == location.line)
        for number in range(first, last + 1)
    ]


def format_source_context(lines: list[SourceLine], use_color: bool = False) -> str:
    """Render source lines with a line-number gutter and a ``=>`` cursor.

    Lines end in ``\\r\\n`` since the output goes to a terminal in raw mode.
    """
    if not lines:
        return ""
    width = len(str(lines[-1].number))
    rendered: list[str] = []
    for line in lines:
        text = line.text.expandtabs(4)
        if line.current:
            row = f"=> {line.number:>{width}}  {text}"
            if use_color:
                row = f"{BOLD}{YELLOW}{row}{RESET}"
        else:
            row = f"   {line.number:>{width}}  {text}"
            if use_color:
                row = f"{DIM}{row}{RESET}"
        rendered.append(row)
    return "\r\n".join(rendered) + "\r\n"
