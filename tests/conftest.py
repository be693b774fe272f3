"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from local_file_cache import settings
from local_file_cache.settings import Settings

pytest_plugins = ("pytest_asyncio",)

_ENV_VARS = (
    "LOCAL_FILE_CACHE_BASE_PATH",
    "LOCAL_FILE_CACHE_DAYS_TO_KEEP",
    "LOCAL_FILE_CACHE_DOTENV_PATH",
)


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop memoized settings so each test loads its own environment."""
    monkeypatch.setattr(settings, "_CACHED_SETTINGS", None)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Clear cache variables, restoring them (or their absence) afterwards.

    Setting before deleting makes monkeypatch remember to remove values that
    python-dotenv writes into ``os.environ`` during a test.
    """
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def base_path(tmp_path: Path) -> Path:
    """Root of the file cache for a single test."""
    return tmp_path / "file_cache"


@pytest.fixture
def cache_settings(base_path: Path) -> Settings:
    """Settings keeping cached files for a week."""
    return Settings(base_path=base_path, days_to_keep_cached_files=7)


@pytest.fixture
def configured_env(
    clean_env: pytest.MonkeyPatch,
    tmp_path: Path,
    base_path: Path,
) -> Iterator[Settings]:
    """Point the environment-backed settings at a temporary cache."""
    blank_env = tmp_path / "blank.env"
    blank_env.write_text("")
    clean_env.setenv("LOCAL_FILE_CACHE_DOTENV_PATH", str(blank_env))
    clean_env.setenv("LOCAL_FILE_CACHE_BASE_PATH", str(base_path))
    clean_env.setenv("LOCAL_FILE_CACHE_DAYS_TO_KEEP", "7")
    yield settings.get_settings(force_reload=True)
