"""
Local file cache.

Save blobs (for example raw API responses) under
``<base path>/<application context>/<subdirectory>`` and prune the ones
older than the configured number of days.
"""

from __future__ import annotations

from .cache import (
    FileCache,
    generate_filename_friendly_timestamp,
    get_cache_directory,
    get_cutoff_timestamp,
    list_cached_entries,
    prune_directory,
    prune_file_cache,
    save_file_to_cache,
    write_file,
)
from .errors import ConfigurationError, ForbiddenPathError, LocalFileCacheError
from .paths import (
    ensure_not_root,
    normalize_application_context,
    resolve_cache_directory,
    validate_base_path,
)
from .settings import Settings, get_settings
from .types import CachedEntry

__all__: tuple[str, ...] = (
    "CachedEntry",
    "ConfigurationError",
    "FileCache",
    "ForbiddenPathError",
    "LocalFileCacheError",
    "Settings",
    "ensure_not_root",
    "generate_filename_friendly_timestamp",
    "get_cache_directory",
    "get_cutoff_timestamp",
    "get_settings",
    "list_cached_entries",
    "normalize_application_context",
    "prune_directory",
    "prune_file_cache",
    "resolve_cache_directory",
    "save_file_to_cache",
    "validate_base_path",
    "write_file",
)
