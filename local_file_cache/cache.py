"""Disk-backed cache helpers.

Files are written to ``<base path>/<application context>/<subdirectory>`` and
pruned once their modification time falls behind the configured retention
window. The module-level functions read ``get_settings()`` on every call;
``FileCache`` binds one ``Settings`` instance instead.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Final

from .paths import StrPath, ensure_not_root, resolve_cache_directory, validate_base_path
from .settings import SECONDS_PER_DAY, Settings, get_settings
from .types import CachedEntry

__all__ = [
    "FileCache",
    "generate_filename_friendly_timestamp",
    "get_cache_directory",
    "get_cutoff_timestamp",
    "list_cached_entries",
    "prune_directory",
    "prune_file_cache",
    "save_file_to_cache",
    "write_file",
]

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d-%H-%M-%S-%f"
_PATH_SEPARATORS: Final[frozenset[str]] = frozenset(
    sep for sep in ("/", os.sep, os.altsep) if sep
)


def generate_filename_friendly_timestamp(now: datetime | None = None) -> str:
    """Return the UTC time as ``YYYY-MM-DD-HH-MM-SS-ffffff``.

    Only digits and hyphens are used, so the result is safe as a file name on
    every platform, e.g. ``"2024-05-17-15-49-14-091430"``.
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(_TIMESTAMP_FORMAT)


def get_cutoff_timestamp(days_to_keep: int, now: float | None = None) -> int:
    """Return the UNIX time before which cached items may be pruned."""
    current = int(time.time() if now is None else now)
    return current - days_to_keep * SECONDS_PER_DAY


def write_file(
    directory: StrPath,
    contents: bytes | str,
    suffix: str,
    prefix: str | None = None,
) -> Path:
    """Write ``contents`` to ``directory/<prefix>.<suffix>`` and return the path.

    A missing ``prefix`` is replaced by a generated timestamp. The directory
    is created if needed and an existing file with the same name is replaced.
    """
    if prefix is None:
        prefix = generate_filename_friendly_timestamp()
    filename = f"{prefix}.{suffix}"
    if (
        not prefix
        or filename in {".", ".."}
        or any(sep in filename for sep in _PATH_SEPARATORS)
    ):
        raise ValueError(f"Invalid cache file name: {filename!r}")

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    data = contents.encode("utf-8") if isinstance(contents, str) else bytes(contents)
    _write_atomic(path, data)
    logger.debug("Saved a file to the file cache: %s", path)
    return path


def _write_atomic(path: Path, data: bytes) -> None:
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def list_cached_entries(directory: StrPath) -> list[CachedEntry]:
    """Return the immediate children of ``directory`` with their mtimes."""
    directory = Path(directory)
    try:
        children = list(directory.iterdir())
    except FileNotFoundError:
        return []
    entries: list[CachedEntry] = []
    for child in children:
        try:
            stat = child.lstat()
        except FileNotFoundError:
            # Removed by another process after the listing.
            continue
        entries.append(CachedEntry(path=child, mtime=int(stat.st_mtime)))
    return entries


def _remove_entry(path: Path) -> bool:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        logger.debug("Cached item was already removed: %s", path)
        return False
    return True


def prune_directory(
    directory: StrPath,
    retention_seconds: int,
    *,
    root: StrPath | None = None,
    now: float | None = None,
) -> list[Path]:
    """Delete every entry of ``directory`` modified before the cutoff.

    The cutoff is ``now - retention_seconds``; an entry whose mtime equals the
    cutoff is kept. When ``root`` is given the directory must sit strictly
    below it. A missing directory is left alone. The first failed deletion
    propagates and leaves the remaining stale entries for the next call.
    Returns the removed paths.
    """
    if retention_seconds < 0:
        raise ValueError("retention_seconds must not be negative")
    directory = Path(directory)
    if root is not None:
        directory = ensure_not_root(directory, root)
    if not directory.exists():
        return []

    cutoff = int(time.time() if now is None else now) - retention_seconds
    stale = [entry for entry in list_cached_entries(directory) if entry.is_stale(cutoff)]
    if not stale:
        logger.debug(
            "No files or directories need to be deleted from the %s file cache.",
            directory,
        )
        return []

    pruned: list[Path] = []
    for entry in stale:
        if _remove_entry(entry.path):
            logger.debug(
                "Pruned stale item from the %s file cache: %s", directory, entry.path
            )
            pruned.append(entry.path)
    return pruned


class FileCache:
    """Local file cache bound to a single base path and retention window."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._root = validate_base_path(settings.base_path)

    @classmethod
    def from_settings(cls, *, force_reload: bool = False) -> FileCache:
        """Build a cache from the environment-backed settings."""
        return cls(get_settings(force_reload=force_reload))

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings(self) -> Settings:
        return self._settings

    def directory(
        self,
        application_context: str,
        subdirectory: StrPath | None = None,
    ) -> Path:
        """Return the cache directory for a context and subdirectory."""
        return resolve_cache_directory(self._root, application_context, subdirectory)

    def entries(
        self,
        application_context: str,
        subdirectory: StrPath | None = None,
    ) -> list[CachedEntry]:
        """List what is currently cached for a context and subdirectory."""
        return list_cached_entries(self.directory(application_context, subdirectory))

    def save(
        self,
        application_context: str,
        subdirectory: StrPath | None,
        contents: bytes | str,
        suffix: str,
        prefix: str | None = None,
    ) -> Path:
        """Persist ``contents`` and return the path of the cached file."""
        directory = self.directory(application_context, subdirectory)
        return write_file(directory, contents, suffix, prefix)

    def prune(
        self,
        application_context: str,
        subdirectory: StrPath | None = None,
    ) -> list[Path]:
        """Remove stale items for a context and subdirectory."""
        directory = self.directory(application_context, subdirectory)
        return prune_directory(
            directory,
            self._settings.retention_seconds,
            root=self._root,
        )

    async def save_async(
        self,
        application_context: str,
        subdirectory: StrPath | None,
        contents: bytes | str,
        suffix: str,
        prefix: str | None = None,
    ) -> Path:
        """Run :meth:`save` in a worker thread."""
        return await asyncio.to_thread(
            self.save, application_context, subdirectory, contents, suffix, prefix
        )

    async def prune_async(
        self,
        application_context: str,
        subdirectory: StrPath | None = None,
    ) -> list[Path]:
        """Run :meth:`prune` in a worker thread."""
        return await asyncio.to_thread(self.prune, application_context, subdirectory)


def _cache_for(settings: Settings | None) -> FileCache:
    return FileCache(settings if settings is not None else get_settings())


def get_cache_directory(
    application_context: str,
    subdirectory: StrPath | None = None,
    *,
    settings: Settings | None = None,
) -> Path:
    """Return the configured cache directory for a context and subdirectory."""
    return _cache_for(settings).directory(application_context, subdirectory)


def save_file_to_cache(
    application_context: str,
    subdirectory: StrPath | None,
    contents: bytes | str,
    suffix: str,
    prefix: str | None = None,
    *,
    settings: Settings | None = None,
) -> Path:
    """Save ``contents`` under the configured cache, e.g. as ``<timestamp>.json``."""
    return _cache_for(settings).save(
        application_context, subdirectory, contents, suffix, prefix
    )


def prune_file_cache(
    application_context: str,
    subdirectory: StrPath | None = None,
    *,
    settings: Settings | None = None,
) -> list[Path]:
    """Prune stale items from the configured cache."""
    return _cache_for(settings).prune(application_context, subdirectory)
