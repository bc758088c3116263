"""Extraction options, deduplicated content blocks, and the result contract."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Literal

from mdcite.parsing.models import AnchorKind
from mdcite.validation.models import EnrichedLinkReference

LinkStatus = Literal["skipped", "extracted", "error"]


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """Per-run switches for extraction eligibility."""

    full_files: bool = False


@dataclass(frozen=True, slots=True)
class EligibilityDecision:
    eligible: bool
    reason: str


@dataclass(frozen=True, slots=True)
class SourceOccurrence:
    """One link that produced a content block."""

    target_path: str | None
    anchor: str | None
    anchor_kind: AnchorKind | None

    def to_dict(self) -> dict[str, Any]:
        return {"targetPath": self.target_path, "anchor": self.anchor, "anchorKind": self.anchor_kind}


@dataclass(slots=True)
class ExtractedContentBlock:
    """Extracted text shared by every link that produced the same bytes."""

    content: str
    source_links: list[SourceOccurrence] = field(default_factory=list)

    @property
    def content_length(self) -> int:
        return len(self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "contentLength": self.content_length,
            "sourceLinks": [occurrence.to_dict() for occurrence in self.source_links],
        }


@dataclass(frozen=True, slots=True)
class ProcessedLinkEntry:
    source_link: EnrichedLinkReference
    content_id: str | None
    status: LinkStatus
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sourceLink": self.source_link.to_dict(),
            "contentId": self.content_id,
            "status": self.status,
        }
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True, slots=True)
class ExtractionStats:
    total_links: int = 0
    unique_content: int = 0
    duplicate_content_detected: int = 0
    characters_saved: int = 0
    compression_ratio: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalLinks": self.total_links,
            "uniqueContent": self.unique_content,
            "duplicateContentDetected": self.duplicate_content_detected,
            "charactersSaved": self.characters_saved,
            "compressionRatio": self.compression_ratio,
        }


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Deduplicated extraction package for downstream consumers."""

    content_blocks: dict[str, ExtractedContentBlock]
    processed_links: tuple[ProcessedLinkEntry, ...]
    stats: ExtractionStats

    @property
    def succeeded(self) -> bool:
        return self.stats.unique_content > 0

    def total_character_length(self) -> int:
        """Length of the compact JSON serialization of the content blocks."""

        blocks = {content_id: block.to_dict() for content_id, block in self.content_blocks.items()}
        return len(json.dumps(blocks, ensure_ascii=False, separators=(",", ":")))

    def to_dict(self) -> dict[str, Any]:
        blocks: dict[str, Any] = {content_id: block.to_dict() for content_id, block in self.content_blocks.items()}
        blocks["_totalCharacterLength"] = self.total_character_length()
        return {
            "contentBlocks": blocks,
            "report": {"processedLinks": [entry.to_dict() for entry in self.processed_links]},
            "stats": self.stats.to_dict(),
        }
