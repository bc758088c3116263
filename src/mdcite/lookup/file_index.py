"""Filename index for resolving bare markdown filenames inside a scope folder."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from difflib import get_close_matches
import logging
import os
from pathlib import Path
import re
from typing import Literal, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

LookupReason = Literal["duplicate", "not_found"]

_MARKDOWN_SUFFIX = ".md"
_DOUBLE_SUFFIX_RE = re.compile(r"(\.md)+$")


@dataclass(frozen=True, slots=True)
class FileLookupResult:
    """Outcome of one filename lookup."""

    found: bool
    path: str | None = None
    reason: LookupReason | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class FileIndexStats:
    total_files: int
    duplicates: int
    scope_folder: str


@runtime_checkable
class FilenameLookup(Protocol):
    """Contract consumed by the link resolver's last resolution strategy."""

    def resolve(self, filename: str) -> FileLookupResult:
        """Map a bare filename to one absolute path."""

    def closest(self, filename: str, *, limit: int = 3) -> list[str]:
        """Known filenames that look like ``filename``."""


class FileIndex:
    """In-memory basename → path index of ``*.md`` files under a scope folder."""

    def __init__(self) -> None:
        self._paths: dict[str, str] = {}
        self._duplicates: set[str] = set()

    def build(self, scope_folder: str | Path) -> FileIndexStats:
        """Rescan ``scope_folder`` recursively and replace the index contents."""

        self._paths.clear()
        self._duplicates.clear()

        scope = Path(scope_folder).resolve()
        for path in sorted(scope.rglob(f"*{_MARKDOWN_SUFFIX}")):
            if not path.is_file():
                continue
            name = path.name
            if name in self._paths:
                self._duplicates.add(name)
                continue
            self._paths[name] = str(path)

        if self._duplicates:
            logger.warning("Found duplicate filenames in scope: %s", ", ".join(sorted(self._duplicates)))

        return FileIndexStats(
            total_files=len(self._paths),
            duplicates=len(self._duplicates),
            scope_folder=str(scope),
        )

    def __len__(self) -> int:
        return len(self._paths)

    def resolve(self, filename: str) -> FileLookupResult:
        name = os.path.basename(filename)
        candidates = [name]
        if not name.endswith(_MARKDOWN_SUFFIX):
            candidates.append(f"{name}{_MARKDOWN_SUFFIX}")
        collapsed = _DOUBLE_SUFFIX_RE.sub(_MARKDOWN_SUFFIX, name)
        if collapsed != name:
            candidates.append(collapsed)

        for candidate in candidates:
            if candidate not in self._paths:
                continue
            if candidate in self._duplicates:
                return FileLookupResult(
                    found=False,
                    reason="duplicate",
                    message=f'Multiple files named "{candidate}" found in scope. Use a relative path to disambiguate.',
                )
            return FileLookupResult(found=True, path=self._paths[candidate])

        return FileLookupResult(
            found=False,
            reason="not_found",
            message=f'File "{name}" not found in scope folder.',
        )

    def closest(self, filename: str, *, limit: int = 3) -> list[str]:
        return close_filenames(filename, self._paths, limit=limit)


def close_filenames(filename: str, known: Iterable[str], *, limit: int = 3) -> list[str]:
    """Filenames resembling ``filename`` by edit similarity, then by shared prefix."""

    name = os.path.basename(filename)
    candidates = sorted(set(known))
    matches = get_close_matches(name, candidates, n=limit, cutoff=0.6)
    stem = name.removesuffix(_MARKDOWN_SUFFIX)
    if stem:
        for candidate in candidates:
            if len(matches) >= limit:
                break
            if candidate.startswith(stem) and candidate not in matches:
                matches.append(candidate)
    return matches
