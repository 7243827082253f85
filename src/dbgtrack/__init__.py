"""dbgtrack - follow debugger.lua stop locations in a terminal session."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dbgtrack")
except PackageNotFoundError:
    __version__ = "0.0.0"
