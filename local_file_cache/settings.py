"""Application configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

from .errors import ConfigurationError

SECONDS_PER_DAY: Final[int] = 24 * 60 * 60

_CACHED_SETTINGS: Settings | None = None


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    base_path: Path
    days_to_keep_cached_files: int

    @property
    def retention_seconds(self) -> int:
        """Return the retention window in seconds."""
        return self.days_to_keep_cached_files * SECONDS_PER_DAY


def _parse_days(value: str) -> int:
    """Convert the retention setting to a non-negative day count."""
    try:
        days = int(value.strip())
    except ValueError as exc:
        raise ConfigurationError(
            f"LOCAL_FILE_CACHE_DAYS_TO_KEEP must be an integer, got {value!r}."
        ) from exc
    if days < 0:
        raise ConfigurationError(
            "LOCAL_FILE_CACHE_DAYS_TO_KEEP must not be negative."
        )
    return days


def get_settings(*, force_reload: bool = False) -> Settings:
    """Load configuration, optionally reloading from the environment."""
    global _CACHED_SETTINGS  # noqa: PLW0603
    if not force_reload and _CACHED_SETTINGS is not None:
        return _CACHED_SETTINGS

    dotenv_override = os.getenv("LOCAL_FILE_CACHE_DOTENV_PATH")
    if dotenv_override:
        load_dotenv(dotenv_override, override=True)
    else:
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path=dotenv_path)

    base_path_raw = os.getenv("LOCAL_FILE_CACHE_BASE_PATH")
    if not base_path_raw or not base_path_raw.strip():
        raise ConfigurationError(
            "LOCAL_FILE_CACHE_BASE_PATH must be set in the environment or .env file."
        )
    days_raw = os.getenv("LOCAL_FILE_CACHE_DAYS_TO_KEEP")
    if days_raw is None or not days_raw.strip():
        raise ConfigurationError(
            "LOCAL_FILE_CACHE_DAYS_TO_KEEP must be set in the environment or .env file."
        )

    _CACHED_SETTINGS = Settings(
        base_path=Path(base_path_raw.strip()).expanduser(),
        days_to_keep_cached_files=_parse_days(days_raw),
    )
    return _CACHED_SETTINGS
