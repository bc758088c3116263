"""Ordered target-path resolution strategies for cross-document links."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import os
import re
from typing import Literal
from urllib.parse import unquote

StrategyName = Literal["direct", "symlink", "repository-root", "file-index"]

_ROOT_RELATIVE_RE = re.compile(r"^[A-Za-z0-9_-]+/")

STRATEGY_LABELS: dict[StrategyName, str] = {
    "direct": "direct path",
    "symlink": "symlink-resolved source directory",
    "repository-root": "repository-root path",
    "file-index": "file index",
}


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    path: str
    strategy: StrategyName


def spellings(raw_path: str) -> list[str]:
    """URL-decoded spelling first, then the raw spelling when it differs."""

    decoded = unquote(raw_path)
    return [decoded] if decoded == raw_path else [decoded, raw_path]


def _join(directory: str, relative: str) -> str:
    if os.path.isabs(relative):
        return os.path.normpath(relative)
    return os.path.normpath(os.path.join(directory, relative))


def standard_path(raw_path: str, source_path: str) -> str:
    """Where the link points when read relative to the source directory."""

    return _join(os.path.dirname(source_path), unquote(raw_path))


def resolve_direct(raw_path: str, source_path: str) -> str | None:
    source_dir = os.path.dirname(source_path)
    for spelling in spellings(raw_path):
        candidate = _join(source_dir, spelling)
        if os.path.isfile(candidate):
            return candidate
    return None


def resolve_via_real_source(raw_path: str, source_path: str) -> str | None:
    real_source = os.path.realpath(source_path)
    if real_source == os.path.abspath(source_path):
        return None
    real_dir = os.path.dirname(real_source)
    for spelling in spellings(raw_path):
        candidate = _join(real_dir, spelling)
        if os.path.isfile(candidate):
            return candidate
    return None


def resolve_from_repository_root(raw_path: str, source_path: str) -> str | None:
    """Treat ``dir/file.md`` as rooted at some ancestor of the source directory."""

    decoded = unquote(raw_path)
    if os.path.isabs(decoded) or not _ROOT_RELATIVE_RE.match(decoded):
        return None

    current = os.path.dirname(os.path.abspath(source_path))
    while True:
        candidate = os.path.normpath(os.path.join(current, decoded))
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


FILESYSTEM_STRATEGIES: tuple[tuple[StrategyName, Callable[[str, str], str | None]], ...] = (
    ("direct", resolve_direct),
    ("symlink", resolve_via_real_source),
    ("repository-root", resolve_from_repository_root),
)


def resolve_on_filesystem(raw_path: str, source_path: str) -> ResolvedPath | None:
    """First filesystem strategy that finds an existing file, in precedence order."""

    for name, strategy in FILESYSTEM_STRATEGIES:
        found = strategy(raw_path, source_path)
        if found is not None:
            return ResolvedPath(path=found, strategy=name)
    return None


def relative_link_path(source_path: str, target_path: str) -> str:
    return os.path.relpath(target_path, os.path.dirname(source_path)).replace(os.sep, "/")


def sibling_markdown_files(directory: str) -> list[str]:
    try:
        return sorted(entry.name for entry in os.scandir(directory) if entry.is_file() and entry.name.endswith(".md"))
    except OSError:
        return []
