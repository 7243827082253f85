"""Incremental scanner for debugger.lua frame announcements.

The debugger writes free-form text to the terminal and, whenever it stops or
the user moves between frames, a line announcing the current source position::

    break via dbg() => main.lua:12 in chunk at main.lua:0
    break via dbg.call() => main.lua:40 in main
    Inspecting frame: lib/util.lua:7 in upvalue 'helper'
    ./debugger.lua:502 in upvalue 'dbg'

Output arrives in arbitrary chunks, so a marker can be split across reads.
``MarkerScanner.feed`` passes every character through unchanged but holds back
a trailing partial line that may still turn into a marker.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, NamedTuple

log = logging.getLogger(__name__)

# Literal words that can begin a marker line.
MARKER_ANCHORS = ("break", "Inspecting frame:")

# A complete marker line, newline included. Breakpoint forms capture into
# bp_file/bp_line, frame forms into file/line.
_MARKER_LINE = (
    r"^(?:"
    r"break via dbg(?:\.call)?\([^\n]*\) => (?P<bp_file>[^\s]+):(?P<bp_line>[0-9]+) in [^\n]*"
    r"|(?:Inspecting frame: )?(?P<file>[^\s]+):(?P<line>[0-9]+) in [^\n]*"
    r")"
)
MARKER_RE = re.compile(_MARKER_LINE + r"\n", re.MULTILINE)

# Same line at the very end of the stream, where no newline will follow.
FINAL_MARKER_RE = re.compile(_MARKER_LINE + r"\Z", re.MULTILINE)

# Start of a possible marker on the last, still unterminated line. A bare
# prefix of an anchor word ("Insp") at the end of the buffer counts too.
_ANCHOR_PREFIXES = "|".join(
    re.escape(anchor[:size]) for anchor in MARKER_ANCHORS for size in range(len(anchor), 0, -1)
)
MARKER_START_RE = re.compile(
    r"^(?:(?:" + "|".join(re.escape(a) for a in MARKER_ANCHORS) + r")[^\n]*"
    r"|(?:" + _ANCHOR_PREFIXES + r"))\Z",
    re.MULTILINE,
)


class Location(NamedTuple):
    """Source position announced by the debugger."""

    path: str
    line: int


LocationListener = Callable[[Location], None]


def parse_marker(match: re.Match[str]) -> Location | None:
    """Return the location captured by a ``MARKER_RE`` match.

    Returns ``None`` when the line number is not a positive integer.
    """
    if match.group("bp_file") is not None:
        path, raw_line = match.group("bp_file"), match.group("bp_line")
    else:
        path, raw_line = match.group("file"), match.group("line")
    try:
        line = int(raw_line)
    except ValueError:
        log.debug("ignoring marker with unparsable line %r", raw_line)
        return None
    if line < 1:
        log.debug("ignoring marker with line %d for %s", line, path)
        return None
    return Location(path, line)


class MarkerScanner:
    """Splits a debugger output stream into display text and locations.

    One scanner belongs to one debug session. Calls to ``feed`` must be
    serialized by the caller.

    Args:
        listener: Called with every recognized location, in stream order.
        max_pending: Largest number of characters held back waiting for a
            marker to complete. Longer pending text is released as plain
            output. ``None`` never releases it.
    """

    def __init__(
        self,
        listener: LocationListener | None = None,
        max_pending: int | None = None,
    ) -> None:
        if max_pending is not None and max_pending < 1:
            raise ValueError("max_pending must be a positive integer or None")
        self._buffer = ""
        self._previous = "\n"
        self._location: Location | None = None
        self._listener = listener
        self._max_pending = max_pending

    @property
    def pending(self) -> str:
        """Text held back because it may still complete into a marker."""
        return self._buffer

    def current_location(self) -> Location | None:
        """Return the most recently announced location, if any."""
        return self._location

    def feed(self, chunk: str) -> str:
        """Consume a chunk of debugger output and return text safe to display."""
        # The character before the buffer leads the search text, so "^" only
        # matches after a real newline and never at a chunk boundary.
        text = self._previous + self._buffer + chunk
        output: list[str] = []
        pos = 1

        while (match := MARKER_RE.search(text, pos)) is not None:
            output.append(text[pos : match.end()])
            location = parse_marker(match)
            if location is not None:
                self._set_location(location)
            pos = match.end()

        hold = len(text)
        start = MARKER_START_RE.search(text, pos)
        if start is not None:
            hold = start.start()
            if self._max_pending is not None and len(text) - hold > self._max_pending:
                log.warning(
                    "releasing %d pending characters that never completed a marker",
                    len(text) - hold,
                )
                hold = len(text)

        output.append(text[pos:hold])
        self._previous = text[hold - 1]
        self._buffer = text[hold:]
        return "".join(output)

    def flush(self) -> str:
        """Return and forget any held-back text. Call once the stream ends.

        A held-back line that is already a complete marker apart from its
        newline still updates the current location.
        """
        remaining, self._buffer = self._buffer, ""
        if not remaining:
            return ""
        log.debug("flushing %d pending characters", len(remaining))
        match = FINAL_MARKER_RE.search(self._previous + remaining, 1)
        if match is not None and (location := parse_marker(match)) is not None:
            self._set_location(location)
        self._previous = remaining[-1]
        return remaining

    def _set_location(self, location: Location) -> None:
        log.debug("location %s:%d", location.path, location.line)
        self._location = location
        if self._listener is not None:
            self._listener(location)
