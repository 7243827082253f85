"""PTY session loop implementation."""

import codecs
import fcntl
import logging
import os
import select
import signal
import struct
import sys
import termios
import tty
from pathlib import Path

from dbgtrack.models import DbgtrackConfig
from dbgtrack.scanner import Location, MarkerScanner
from dbgtrack.session.constants import PTY_READ_SIZE, STDIN_READ_SIZE
from dbgtrack.session.display import location_banner, status_line, trailing_partial_line
from dbgtrack.session.launch import build_launch_config
from dbgtrack.source import read_source_context

log = logging.getLogger(__name__)


class OutputPump:
    """Turns raw debuggee output into bytes for the user's terminal.

    Output is decoded incrementally so multi-byte characters split across
    reads survive, run through a ``MarkerScanner``, and followed by a source
    listing whenever the debugger announces a location.
    """

    def __init__(self, config: DbgtrackConfig, base_dir: Path | None = None):
        self._config = config
        self._base_dir = base_dir
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._stops: list[Location] = []
        self.scanner = MarkerScanner(
            listener=self._stops.append,
            max_pending=config.max_pending_chars,
        )

    def process(self, data: bytes) -> bytes:
        text = self.scanner.feed(self._decoder.decode(data))
        if self._stops and self._config.show_source:
            location = self._stops[-1]
            lines = read_source_context(location, self._config.context_lines, self._base_dir)
            # Repeat an unterminated prompt so it ends up below the listing.
            text += location_banner(location, lines) + trailing_partial_line(text)
        self._stops.clear()
        return text.encode()

    def finish(self) -> bytes:
        """Return everything still held back once the debuggee is gone."""
        text = self.scanner.feed(self._decoder.decode(b"", final=True))
        text += self.scanner.flush()
        self._stops.clear()
        return text.encode()


def _winsize(fd: int) -> tuple[int, int, int, int]:
    """Return (rows, cols, xpixel, ypixel) for the given tty fd."""
    return struct.unpack("HHHH", fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\x00" * 8))


def _set_winsize(fd: int, rows: int, cols: int, xp: int = 0, yp: int = 0) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, xp, yp))


def session_loop(script: str, args: list[str], config: DbgtrackConfig) -> int:
    """Run *script* under the debugger on a PTY and track its location."""
    if not sys.stdin.isatty():
        print("Error: stdin must be a terminal", file=sys.stderr)
        return 1
    if not hasattr(os, "fork"):
        print("Error: interactive sessions require a POSIX environment", file=sys.stderr)
        return 1

    try:
        launch = build_launch_config(script, args, config)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    master_fd, slave_fd = os.openpty()

    # Match the slave PTY size to the real terminal.
    rows, cols, xp, yp = _winsize(sys.stdin.fileno())
    _set_winsize(slave_fd, rows, cols, xp, yp)

    pid = os.fork()
    if pid == 0:
        # Child process: exec the interpreter attached to the slave PTY.
        os.close(master_fd)
        os.setsid()
        fcntl.ioctl(slave_fd, termios.TIOCSCTTY, 0)
        os.dup2(slave_fd, 0)
        os.dup2(slave_fd, 1)
        os.dup2(slave_fd, 2)
        if slave_fd > 2:
            os.close(slave_fd)
        os.execve(launch.executable, launch.argv, launch.env)
        os._exit(1)

    # Parent process: shuttle bytes between real terminal and PTY.
    os.close(slave_fd)
    log.debug("debuggee pid=%d", pid)

    # Forward window-resize signals to the child.
    def _on_winch(_signum, _frame):
        try:
            r, c, xp, yp = _winsize(sys.stdin.fileno())
            _set_winsize(master_fd, r, c, xp, yp)
            os.kill(pid, signal.SIGWINCH)
        except OSError:
            pass

    signal.signal(signal.SIGWINCH, _on_winch)

    # Put the real terminal into raw mode so keystrokes pass through directly.
    old_attrs = termios.tcgetattr(sys.stdin.fileno())
    tty.setraw(sys.stdin.fileno())

    pump = OutputPump(config, base_dir=Path.cwd())
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    os.write(stdout_fd, status_line(script))

    try:
        while True:
            try:
                rfds, _, _ = select.select([stdin_fd, master_fd], [], [])
            except (OSError, ValueError):
                break

            # Stdin -> PTY master (user keystrokes)
            if stdin_fd in rfds:
                try:
                    data = os.read(stdin_fd, STDIN_READ_SIZE)
                except OSError:
                    break
                if not data:
                    break
                os.write(master_fd, data)

            # PTY master -> stdout (debugger output)
            if master_fd in rfds:
                try:
                    data = os.read(master_fd, PTY_READ_SIZE)
                except OSError:
                    break
                if not data:
                    break
                display = pump.process(data)
                if display:
                    os.write(stdout_fd, display)
    finally:
        tail = pump.finish()
        if tail:
            os.write(stdout_fd, tail)
        termios.tcsetattr(sys.stdin.fileno(), termios.TCSAFLUSH, old_attrs)
        os.close(master_fd)

    location = pump.scanner.current_location()
    if location is not None:
        log.debug("last location %s:%d", location.path, location.line)

    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)
