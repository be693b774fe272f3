"""Assertions for checking cache behavior from an application's own tests.

Typical use inside a pytest module::

    from local_file_cache import get_cache_directory
    from local_file_cache.testing import (
        assert_files_have_been_saved_to_local_cache,
        assert_old_files_are_pruned_from_local_cache,
    )

    def test_saves_response(settings):
        directory = get_cache_directory("your_project.some_api", "some_endpoint")
        assert_files_have_been_saved_to_local_cache(directory, fetch_some_endpoint)
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .cache import get_cutoff_timestamp
from .paths import StrPath
from .settings import get_settings


def setup_file_cache_directory(directory: StrPath) -> Path:
    """Ensure the cache directory exists."""
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _count_entries(directory: Path) -> int:
    if not directory.exists():
        return 0
    return sum(1 for _ in directory.iterdir())


def assert_files_have_been_saved_to_local_cache(
    directory: StrPath,
    callback: Callable[[], Any],
) -> None:
    """Run ``callback`` and assert it added at least one entry to ``directory``."""
    path = Path(directory)
    initial_count = _count_entries(path)
    callback()
    final_count = _count_entries(path)
    if final_count <= initial_count:
        raise AssertionError(
            f"expected new files in {path}, found {final_count} (was {initial_count})"
        )


def assert_old_files_are_pruned_from_local_cache(
    directory: StrPath,
    callback: Callable[[], Any],
    *,
    days_to_keep: int | None = None,
) -> None:
    """Run ``callback`` and assert it pruned an old file but kept a recent one.

    Two files are planted around the cutoff for ``days_to_keep``: one ten
    seconds older, one ten seconds newer. ``days_to_keep`` defaults to the
    configured retention. The surviving file is removed afterwards.
    """
    if days_to_keep is None:
        days_to_keep = get_settings().days_to_keep_cached_files
    path = setup_file_cache_directory(directory)
    older_file_path = path / "older_file.txt"
    newer_file_path = path / "newer_file.txt"

    cutoff = get_cutoff_timestamp(days_to_keep)
    older_file_path.touch()
    os.utime(older_file_path, (cutoff - 10, cutoff - 10))
    newer_file_path.touch()
    os.utime(newer_file_path, (cutoff + 10, cutoff + 10))

    callback()

    if older_file_path.exists():
        raise AssertionError(f"{older_file_path} was not pruned")
    if not newer_file_path.exists():
        raise AssertionError(f"{newer_file_path} was pruned too early")

    newer_file_path.unlink()
