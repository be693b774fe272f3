"""Cache directory derivation and the guards around it.

Every cache directory lives at ``base_path / <context> / <subdirectory>``,
where ``<context>`` is the caller's application context converted to a
lowercase, underscored path, e.g. ``"YourProject.SomeApi"`` becomes
``your_project/some_api``. Nothing here touches the filesystem.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Final

from .errors import ForbiddenPathError

StrPath = str | os.PathLike[str]

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_WORD_SEPARATORS = re.compile(r"[\s\-]+")
_NAMESPACE_SEPARATORS = re.compile(r"[./\\]")

# A base path ending in one of these is almost certainly a project checkout,
# and pruning underneath it would delete source files.
_FORBIDDEN_BASE_NAMES: Final[frozenset[str]] = frozenset(
    {
        ".git",
        "_build",
        "config",
        "deps",
        "docs",
        "lib",
        "node_modules",
        "priv",
        "src",
        "test",
        "tests",
    }
)


def _underscore(segment: str) -> str:
    segment = _ACRONYM_BOUNDARY.sub(r"\1_\2", segment)
    segment = _WORD_BOUNDARY.sub(r"\1_\2", segment)
    segment = _WORD_SEPARATORS.sub("_", segment.strip())
    return segment.lower()


def normalize_application_context(application_context: str) -> Path:
    """Convert an application context into a relative path.

    >>> normalize_application_context("YourProject.SomeApi")
    PosixPath('your_project/some_api')
    >>> normalize_application_context("my_app.MyHTTPClient")
    PosixPath('my_app/my_http_client')
    """
    segments = [
        _underscore(part)
        for part in _NAMESPACE_SEPARATORS.split(application_context)
        if part.strip()
    ]
    return Path(*segments)


def validate_base_path(base_path: StrPath) -> Path:
    """Return ``base_path`` as a Path, refusing values that are unsafe to prune."""
    raw = os.fspath(base_path)
    if not raw.strip():
        raise ForbiddenPathError("the file cache base path is empty")
    path = Path(raw).expanduser()
    if path == Path("."):
        raise ForbiddenPathError(
            "refusing to use the current directory as the file cache base path"
        )
    if path.anchor and path == Path(path.anchor):
        raise ForbiddenPathError(
            f"refusing to use the filesystem root as the file cache base path: {path}"
        )
    if path == Path.home():
        raise ForbiddenPathError(
            f"refusing to use the home directory as the file cache base path: {path}"
        )
    if path.name in _FORBIDDEN_BASE_NAMES:
        raise ForbiddenPathError(
            f"refusing to use a source tree directory as the file cache base path: {path}"
        )
    return path


def _collapse(path: StrPath) -> Path:
    return Path(os.path.normpath(Path(path).expanduser()))


def ensure_not_root(directory: StrPath, base_path: StrPath) -> Path:
    """Raise unless ``directory`` sits strictly below ``base_path``.

    Both paths are collapsed first, so ``base/x/..`` counts as the root.
    """
    directory = _collapse(directory)
    root = _collapse(base_path)
    if directory == root:
        raise ForbiddenPathError(
            f"refusing to modify the root file cache directory: {root}"
        )
    if not directory.is_relative_to(root):
        raise ForbiddenPathError(
            f"cache directory {directory} is outside the file cache root {root}"
        )
    return directory


def resolve_cache_directory(
    base_path: StrPath,
    application_context: str,
    subdirectory: StrPath | None = None,
) -> Path:
    """Return the cache directory for a context and subdirectory.

    The subdirectory is joined as-is, so nested paths may be given either as
    ``"v1/some_endpoint"`` or ``Path("v1", "some_endpoint")``. Absolute paths
    and ``..`` components are rejected since they would leave the namespace.
    """
    root = validate_base_path(base_path)
    relative = Path(subdirectory) if subdirectory is not None else Path()
    if relative.anchor or ".." in relative.parts:
        raise ForbiddenPathError(
            f"cache subdirectory must be a relative path inside the cache: {relative}"
        )
    directory = root / normalize_application_context(application_context) / relative
    return ensure_not_root(directory, root)
