"""Shared pytest fixtures for test isolation helpers."""

from pathlib import Path

import pytest

import dbgtrack.config as config_module


@pytest.fixture()
def dbgtrack_config_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Path, Path]:
    """Redirect dbgtrack config paths to a temp directory."""
    config_dir = tmp_path / ".dbgtrack"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    return config_dir, config_file


@pytest.fixture()
def config_dir(dbgtrack_config_paths: tuple[Path, Path]) -> Path:
    return dbgtrack_config_paths[0]


@pytest.fixture()
def config_file(dbgtrack_config_paths: tuple[Path, Path]) -> Path:
    return dbgtrack_config_paths[1]


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove dbgtrack environment overrides inherited from the shell."""
    for name in (
        "DBGTRACK_LUA",
        "DBGTRACK_DEBUGGER_PATH",
        "DBGTRACK_SHOW_SOURCE",
        "DBGTRACK_CONTEXT_LINES",
    ):
        monkeypatch.delenv(name, raising=False)
