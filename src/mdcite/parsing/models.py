"""Canonical parse output shared by the tokenizer and document views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

LinkSyntax = Literal["markdown", "wiki"]
LinkScope = Literal["internal", "cross-document"]
AnchorKind = Literal["header", "block"]
MarkerKind = Literal["force", "stop"]


@dataclass(frozen=True, slots=True)
class ExtractionMarker:
    """Inline marker such as ``%%force-extract%%`` trailing a link."""

    kind: MarkerKind
    full_match: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "fullMatch": self.full_match}


@dataclass(frozen=True, slots=True)
class TargetPath:
    """Link target path as written and as resolved against the source."""

    raw: str | None = None
    absolute: str | None = None
    relative: str | None = None


@dataclass(frozen=True, slots=True)
class LinkReference:
    """One outgoing reference discovered in a source document."""

    syntax: LinkSyntax
    scope: LinkScope
    anchor_kind: AnchorKind | None
    source_path: str
    target: TargetPath
    anchor: str | None
    text: str | None
    full_match: str
    line: int
    column: int
    extraction_marker: ExtractionMarker | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "linkType": self.syntax,
            "scope": self.scope,
            "anchorType": self.anchor_kind,
            "source": {"path": {"absolute": self.source_path}},
            "target": {
                "path": {
                    "raw": self.target.raw,
                    "absolute": self.target.absolute,
                    "relative": self.target.relative,
                },
                "anchor": self.anchor,
            },
            "text": self.text,
            "fullMatch": self.full_match,
            "line": self.line,
            "column": self.column,
            "extractionMarker": self.extraction_marker.to_dict() if self.extraction_marker else None,
        }


@dataclass(frozen=True, slots=True)
class AnchorDefinition:
    """An addressable location declared inside a document."""

    kind: AnchorKind
    id: str
    escaped_id: str | None
    raw_text: str | None
    full_match: str
    line: int
    column: int

    def matches(self, candidate: str) -> bool:
        if self.id == candidate:
            return True
        return self.kind == "header" and self.escaped_id is not None and self.escaped_id == candidate


@dataclass(frozen=True, slots=True)
class HeadingInfo:
    level: int
    text: str
    line: int


@dataclass(frozen=True, slots=True)
class RawParseOutput:
    """Immutable tokenizer result for one document."""

    path: str
    content: str
    tokens: Any
    links: tuple[LinkReference, ...] = field(default_factory=tuple)
    anchors: tuple[AnchorDefinition, ...] = field(default_factory=tuple)
    headings: tuple[HeadingInfo, ...] = field(default_factory=tuple)
