"""Configuration model for dbgtrack."""

from pydantic import BaseModel, Field

DEFAULT_LUA = "lua"
DEFAULT_CONTEXT_LINES = 3
DEFAULT_MAX_PENDING_CHARS = 65536


class DbgtrackConfig(BaseModel):
    """Runtime configuration for dbgtrack."""

    lua: str = Field(
        default=DEFAULT_LUA,
        min_length=1,
        description="Lua interpreter used to run the debugged script (name on PATH or a path).",
    )
    debugger_path: str | None = Field(
        default=None,
        description=(
            "Directory containing debugger.lua. When set it is prepended to LUA_PATH "
            "so scripts can `require(\"debugger\")` without installing it."
        ),
    )
    show_source: bool = Field(
        default=True,
        description="Print the source lines around each new stop location.",
    )
    context_lines: int = Field(
        default=DEFAULT_CONTEXT_LINES,
        ge=0,
        description="Number of lines shown above and below the current line.",
    )
    max_pending_chars: int | None = Field(
        default=DEFAULT_MAX_PENDING_CHARS,
        ge=1,
        description=(
            "Largest amount of output held back while waiting for a marker line to "
            "complete. None keeps it until the line ends, however long it gets."
        ),
    )
