"""Interactive debug sessions: run a Lua script on a PTY and follow its stops."""

from dbgtrack.session.loop import OutputPump, session_loop

__all__ = ["OutputPump", "session_loop"]
