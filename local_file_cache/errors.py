"""Exceptions raised by the local file cache."""

from __future__ import annotations


class LocalFileCacheError(Exception):
    """Base class for all cache errors."""


class ConfigurationError(LocalFileCacheError, RuntimeError):
    """A configuration value is missing or not usable."""


class ForbiddenPathError(ConfigurationError):
    """Refusing to touch a directory outside an application namespace."""
