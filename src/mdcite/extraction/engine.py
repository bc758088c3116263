"""Eligibility-filtered, content-addressed extraction of linked text."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
import logging

from mdcite.documents.cache import DocumentCache
from mdcite.documents.view import ParsedDocumentView
from mdcite.errors import CitationError, ExtractionFailure
from mdcite.extraction.anchors import heading_for_anchor, normalize_block_id
from mdcite.extraction.content_id import generate_content_id
from mdcite.extraction.eligibility import EligibilityChain
from mdcite.extraction.models import (
    ExtractedContentBlock,
    ExtractionOptions,
    ExtractionResult,
    ExtractionStats,
    ProcessedLinkEntry,
    SourceOccurrence,
)
from mdcite.validation.models import EnrichedLinkReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Slot:
    """Per-link outcome before content ids are assigned."""

    link: EnrichedLinkReference
    content: str | None = None
    skip_reason: str | None = None
    error_reason: str | None = None


class ExtractionEngine:
    """Turn validated links into deduplicated content blocks.

    Target documents are loaded concurrently through the shared cache, but
    ids are assigned in input order so the first occurrence of any text
    always owns its block and the report mirrors the link order.
    """

    def __init__(self, cache: DocumentCache, chain: EligibilityChain | None = None) -> None:
        self._cache = cache
        self._chain = chain or EligibilityChain()

    async def extract(
        self,
        links: Sequence[EnrichedLinkReference],
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult:
        options = options or ExtractionOptions()
        candidates = [link for link in links if link.scope != "internal"]
        slots = await asyncio.gather(*(self._process(link, options) for link in candidates))

        blocks: dict[str, ExtractedContentBlock] = {}
        entries: list[ProcessedLinkEntry] = []
        for slot in slots:
            if slot.skip_reason is not None:
                entries.append(ProcessedLinkEntry(slot.link, None, "skipped", slot.skip_reason))
                continue
            if slot.error_reason is not None or slot.content is None:
                entries.append(ProcessedLinkEntry(slot.link, None, "error", slot.error_reason))
                continue

            content_id = _assign_block(blocks, slot.content)
            blocks[content_id].source_links.append(
                SourceOccurrence(
                    target_path=slot.link.target.absolute,
                    anchor=slot.link.anchor,
                    anchor_kind=slot.link.anchor_kind,
                )
            )
            entries.append(ProcessedLinkEntry(slot.link, content_id, "extracted"))

        stats = compute_stats(len(candidates), blocks)
        logger.info(
            "Extracted %d unique blocks from %d links (%d duplicates, %d characters saved)",
            stats.unique_content,
            stats.total_links,
            stats.duplicate_content_detected,
            stats.characters_saved,
        )
        return ExtractionResult(content_blocks=blocks, processed_links=tuple(entries), stats=stats)

    async def _process(self, link: EnrichedLinkReference, options: ExtractionOptions) -> _Slot:
        if link.validation.status == "error":
            return _Slot(link, skip_reason=f"Link failed validation: {link.validation.message}")

        decision = self._chain.decide(link, options)
        if not decision.eligible:
            return _Slot(link, skip_reason=f"Link not eligible: {decision.reason}")

        target = link.target.absolute
        if not target:
            return _Slot(link, error_reason="Extraction failed: link target was not resolved")

        try:
            view = await self._cache.resolve(target)
            content = self._extract_content(view, link)
        except CitationError as exc:
            logger.info("Extraction failed for %s line %d: %s", link.source_path, link.line, exc)
            return _Slot(link, error_reason=f"Extraction failed: {exc}")
        return _Slot(link, content=content)

    def _extract_content(self, view: ParsedDocumentView, link: EnrichedLinkReference) -> str:
        anchor = link.anchor or ""
        if link.anchor_kind == "header":
            heading = heading_for_anchor(view, anchor)
            section = view.extract_section(heading)
            if section is None:
                raise ExtractionFailure("heading_missing", f"Heading not found: {heading}")
            return section

        if link.anchor_kind == "block":
            block_id = normalize_block_id(anchor)
            block = view.extract_block(block_id)
            if block is None:
                raise ExtractionFailure("block_missing", f"Block anchor not found: ^{block_id}")
            return block

        return view.extract_full_content()


def _assign_block(blocks: dict[str, ExtractedContentBlock], content: str) -> str:
    """Return the id of the block holding ``content``, creating it when new.

    A truncated-hash collision between different texts extends the id with
    a numeric suffix instead of merging.
    """

    base_id = generate_content_id(content)
    content_id = base_id
    suffix = 1
    while content_id in blocks and blocks[content_id].content != content:
        content_id = f"{base_id}-{suffix}"
        suffix += 1
    if content_id not in blocks:
        blocks[content_id] = ExtractedContentBlock(content=content)
    return content_id


def compute_stats(total_links: int, blocks: dict[str, ExtractedContentBlock]) -> ExtractionStats:
    duplicates = 0
    saved = 0
    unique_characters = 0
    for block in blocks.values():
        extra = len(block.source_links) - 1
        duplicates += extra
        saved += extra * block.content_length
        unique_characters += block.content_length

    denominator = unique_characters + saved
    return ExtractionStats(
        total_links=total_links,
        unique_content=len(blocks),
        duplicate_content_detected=duplicates,
        characters_saved=saved,
        compression_ratio=saved / denominator if denominator else 0.0,
    )
