"""Configuration for dbgtrack."""

import json
import logging
import os
import secrets
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dbgtrack.models import DbgtrackConfig

log = logging.getLogger(__name__)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "DbgtrackConfig",
    "load_config",
    "save_config",
    "default_log_file",
    "parse_bool",
]

CONFIG_DIR = Path.home() / ".dbgtrack"
CONFIG_FILE = CONFIG_DIR / "config.json"
LOG_FILE_NAME = "session.log"
BOOLEAN_TRUE_STRINGS = {"1", "true", "yes", "on"}
BOOLEAN_FALSE_STRINGS = {"0", "false", "no", "off"}


def parse_bool(raw: str) -> bool | None:
    """Interpret an environment-style boolean; ``None`` when unrecognized."""
    normalized = raw.strip().lower()
    if normalized in BOOLEAN_TRUE_STRINGS:
        return True
    if normalized in BOOLEAN_FALSE_STRINGS:
        return False
    return None


def load_config() -> DbgtrackConfig:
    """Load config from file, with env var overrides.

    Reads ``~/.dbgtrack/config.json`` and applies environment variable
    overrides (``DBGTRACK_LUA``, ``DBGTRACK_DEBUGGER_PATH``,
    ``DBGTRACK_SHOW_SOURCE`` and ``DBGTRACK_CONTEXT_LINES``).  Falls back to
    defaults when the file is absent, contains invalid JSON, or holds values
    the model rejects.

    Returns:
        The resolved ``DbgtrackConfig`` instance.
    """
    raw_config: dict[str, Any] = {}

    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                loaded = json.load(f)
        except json.JSONDecodeError as exc:
            log.warning(
                "invalid config JSON in %s (%s); falling back to defaults",
                CONFIG_FILE,
                exc,
            )
        else:
            if isinstance(loaded, dict):
                raw_config = loaded
            log.debug("loaded config from %s", CONFIG_FILE)

    try:
        config = DbgtrackConfig.model_validate(raw_config)
    except ValidationError as exc:
        log.warning(
            "invalid values in %s (%d errors); falling back to defaults",
            CONFIG_FILE,
            exc.error_count(),
        )
        config = DbgtrackConfig()

    # Env var overrides
    if lua := os.environ.get("DBGTRACK_LUA"):
        config.lua = lua
    if debugger_path := os.environ.get("DBGTRACK_DEBUGGER_PATH"):
        config.debugger_path = debugger_path
    if show_source_raw := os.environ.get("DBGTRACK_SHOW_SOURCE"):
        show_source = parse_bool(show_source_raw)
        if show_source is None:
            log.warning("ignoring DBGTRACK_SHOW_SOURCE=%r (expected a boolean)", show_source_raw)
        else:
            config.show_source = show_source
    if context_raw := os.environ.get("DBGTRACK_CONTEXT_LINES"):
        try:
            context_lines = int(context_raw)
        except ValueError:
            context_lines = -1
        if context_lines < 0:
            log.warning(
                "ignoring DBGTRACK_CONTEXT_LINES=%r (expected a non-negative integer)",
                context_raw,
            )
        else:
            config.context_lines = context_lines

    return config


def save_config(config: DbgtrackConfig) -> None:
    """Save config to file.

    Writes ``~/.dbgtrack/config.json`` atomically (temp file + rename).

    Args:
        config: Configuration to persist.

    Raises:
        OSError: If the config directory or file cannot be created or written.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True, mode=0o700)
    temp_file = CONFIG_DIR / f".{CONFIG_FILE.name}.{os.getpid()}.{secrets.token_hex(8)}.tmp"
    fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(config.model_dump(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_file, CONFIG_FILE)
    except Exception:
        temp_file.unlink(missing_ok=True)
        raise
    log.debug("saved config to %s", CONFIG_FILE)


def default_log_file() -> Path:
    """Return the log file used by interactive sessions, creating its directory.

    Raises:
        OSError: If the config directory cannot be created.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True, mode=0o700)
    return CONFIG_DIR / LOG_FILE_NAME
