"""Domain errors raised by parsing, resolution, and extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ResolutionReason = Literal["not_found", "ambiguous"]
ExtractionFailureKind = Literal["heading_missing", "block_missing", "invalid_block_index"]


class CitationError(Exception):
    """Base class for every error raised by this package."""


@dataclass(slots=True)
class ParseFailure(CitationError):
    """A document could not be read or tokenized."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


@dataclass(slots=True)
class PathResolutionFailure(CitationError):
    """No resolution strategy located the link target."""

    raw_path: str
    reason: ResolutionReason
    suggestion: str | None = None

    def __str__(self) -> str:
        if self.reason == "ambiguous":
            return f"Ambiguous file reference: {self.raw_path}"
        return f"File not found: {self.raw_path}"


@dataclass(slots=True)
class AnchorNotFound(CitationError):
    """The target document exists but has no matching anchor."""

    anchor: str
    path: str
    suggestion: str | None = None

    def __str__(self) -> str:
        return f"Anchor not found: #{self.anchor}"


@dataclass(slots=True)
class ExtractionFailure(CitationError):
    """Content could not be cut out of a resolved target."""

    kind: ExtractionFailureKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class CacheEvictionRace(CitationError):
    """A failed parse was observed in the cache before it was evicted."""

    path: str

    def __str__(self) -> str:
        return f"Failed cache entry still registered for {self.path}"
