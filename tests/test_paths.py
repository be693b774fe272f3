"""Tests for cache directory derivation."""

from __future__ import annotations

from pathlib import Path

import pytest

from local_file_cache.errors import ConfigurationError, ForbiddenPathError
from local_file_cache.paths import (
    ensure_not_root,
    normalize_application_context,
    resolve_cache_directory,
    validate_base_path,
)


@pytest.mark.parametrize(
    ("context", "expected"),
    [
        ("YourProject.SomeApi", Path("your_project", "some_api")),
        ("YourProject.SomeApi.SomeCategory", Path("your_project", "some_api", "some_category")),
        ("your_project.some_api", Path("your_project", "some_api")),
        ("MyHTTPClient", Path("my_http_client")),
        ("SomeAPI", Path("some_api")),
        ("V2Endpoints", Path("v2_endpoints")),
        ("billing-service.Invoices", Path("billing_service", "invoices")),
        ("reports..Weekly.", Path("reports", "weekly")),
    ],
)
def test_normalize_application_context(context: str, expected: Path) -> None:
    assert normalize_application_context(context) == expected


def test_resolve_joins_base_context_and_subdirectory(base_path: Path) -> None:
    directory = resolve_cache_directory(base_path, "YourProject.SomeApi", "some_endpoint")
    assert directory == base_path / "your_project" / "some_api" / "some_endpoint"


def test_resolve_accepts_nested_subdirectory(base_path: Path) -> None:
    nested = Path("v1", "some_category", "some_endpoint")
    directory = resolve_cache_directory(base_path, "YourProject.SomeApi", nested)
    assert directory == base_path / "your_project" / "some_api" / nested
    assert resolve_cache_directory(
        base_path, "YourProject.SomeApi", "v1/some_category/some_endpoint"
    ) == directory


def test_resolve_is_deterministic(base_path: Path) -> None:
    first = resolve_cache_directory(base_path, "YourProject.SomeApi", "some_endpoint")
    second = resolve_cache_directory(base_path, "YourProject.SomeApi", "some_endpoint")
    assert first == second


def test_resolve_without_subdirectory_uses_context(base_path: Path) -> None:
    expected = base_path / "your_project" / "some_api"
    assert resolve_cache_directory(base_path, "YourProject.SomeApi") == expected
    assert resolve_cache_directory(base_path, "YourProject.SomeApi", "") == expected


def test_resolve_does_not_touch_filesystem(base_path: Path) -> None:
    resolve_cache_directory(base_path, "YourProject.SomeApi", "some_endpoint")
    assert not base_path.exists()


@pytest.mark.parametrize("context", ["", ".", "  "])
def test_resolve_refuses_root_directory(base_path: Path, context: str) -> None:
    """A path without any namespace would let the pruner empty the whole cache."""
    with pytest.raises(ForbiddenPathError, match="root file cache directory"):
        resolve_cache_directory(base_path, context, None)


@pytest.mark.parametrize("subdirectory", ["../elsewhere", "a/../../b", "/etc"])
def test_resolve_refuses_escaping_subdirectory(base_path: Path, subdirectory: str) -> None:
    with pytest.raises(ForbiddenPathError):
        resolve_cache_directory(base_path, "YourProject.SomeApi", subdirectory)


@pytest.mark.parametrize("name", ["src", "lib", "tests", ".git", "config"])
def test_validate_base_path_refuses_source_tree_names(tmp_path: Path, name: str) -> None:
    with pytest.raises(ForbiddenPathError, match="source tree"):
        validate_base_path(tmp_path / name)


@pytest.mark.parametrize("value", ["", "   ", "."])
def test_validate_base_path_refuses_empty_and_current_directory(value: str) -> None:
    with pytest.raises(ConfigurationError):
        validate_base_path(value)


def test_validate_base_path_refuses_filesystem_root(tmp_path: Path) -> None:
    with pytest.raises(ForbiddenPathError, match="filesystem root"):
        validate_base_path(Path(tmp_path.anchor))


def test_validate_base_path_refuses_home(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    with pytest.raises(ForbiddenPathError, match="home directory"):
        validate_base_path(home)


def test_validate_base_path_accepts_regular_directory(base_path: Path) -> None:
    assert validate_base_path(str(base_path)) == base_path


def test_ensure_not_root(base_path: Path) -> None:
    inside = base_path / "your_project" / "some_api"
    assert ensure_not_root(inside, base_path) == inside
    with pytest.raises(ForbiddenPathError):
        ensure_not_root(base_path, base_path)
    with pytest.raises(ForbiddenPathError, match="outside"):
        ensure_not_root(base_path.parent / "other", base_path)


def test_ensure_not_root_collapses_parent_references(base_path: Path) -> None:
    """``base/x/..`` is the root itself and must be refused."""
    with pytest.raises(ForbiddenPathError, match="root file cache directory"):
        ensure_not_root(base_path / "x" / "..", base_path)
    with pytest.raises(ForbiddenPathError, match="outside"):
        ensure_not_root(base_path / "x" / ".." / ".." / "other", base_path)
    assert ensure_not_root(base_path / "x" / ".." / "y", base_path) == base_path / "y"
