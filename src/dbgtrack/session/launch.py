"""Build the command line and environment for the debugged Lua script."""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from dbgtrack.models import DbgtrackConfig
from dbgtrack.session.constants import NOCOLOR_ENV

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaunchConfig:
    """Everything needed to exec the debuggee on the slave PTY."""

    executable: str
    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)


def _resolve_executable(value: str) -> str | None:
    if os.sep in value or (os.altsep and os.altsep in value):
        return value if os.access(value, os.X_OK) else None
    return shutil.which(value)


def _lua_path(debugger_path: str, current: str | None) -> str:
    """Prepend the debugger directory to a LUA_PATH value.

    A trailing ``;;`` keeps Lua's default search path when none was set.
    """
    entry = str(Path(debugger_path).expanduser() / "?.lua")
    if current:
        return f"{entry};{current}"
    return f"{entry};;"


def build_launch_config(
    script: str, args: list[str], config: DbgtrackConfig
) -> LaunchConfig:
    """Return how to start *script* under the configured Lua interpreter.

    Raises:
        RuntimeError: If the interpreter cannot be found or executed.
    """
    executable = _resolve_executable(config.lua)
    if executable is None:
        raise RuntimeError(f"Lua interpreter '{config.lua}' not found")

    env = dict(os.environ)
    env[NOCOLOR_ENV] = "1"
    if config.debugger_path:
        env["LUA_PATH"] = _lua_path(config.debugger_path, env.get("LUA_PATH"))
        log.debug("LUA_PATH=%s", env["LUA_PATH"])

    argv = [config.lua, script, *args]
    log.debug("launching %s as %s", executable, argv)
    return LaunchConfig(executable=executable, argv=argv, env=env)
