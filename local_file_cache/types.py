"""Package-wide type definitions."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class CachedEntry:
    """A file or directory found directly inside a cache directory."""

    path: Path
    mtime: int

    def is_stale(self, cutoff: int) -> bool:
        """Return True when the entry was last modified before ``cutoff``."""
        return self.mtime < cutoff
