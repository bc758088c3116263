"""Link validation: resolve each target, confirm anchors, enrich the link."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from urllib.parse import unquote

from mdcite.documents.cache import DocumentCache
from mdcite.documents.view import ParsedDocumentView
from mdcite.errors import AnchorNotFound, ParseFailure, PathResolutionFailure
from mdcite.lookup.file_index import FilenameLookup, close_filenames
from mdcite.parsing.models import LinkReference, TargetPath
from mdcite.validation.models import EnrichedLinkReference, PathConversion, ValidationOutcome, ValidationResult
from mdcite.validation.paths import (
    STRATEGY_LABELS,
    ResolvedPath,
    relative_link_path,
    resolve_on_filesystem,
    sibling_markdown_files,
    standard_path,
)

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5

_MARKDOWN_CLEANUP = (
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"==([^=]+)=="), r"\1"),
    (re.compile(r"`"), ""),
    (re.compile(r"\*\*"), ""),
    (re.compile(r"\*"), ""),
)


def clean_markdown(text: str) -> str:
    """Strip inline markdown decoration for loose heading comparison."""

    for pattern, replacement in _MARKDOWN_CLEANUP:
        text = pattern.sub(replacement, text)
    return text.strip()


def anchor_exists(view: ParsedDocumentView, anchor: str) -> bool:
    """Accept either addressable spelling of a header, or a ``^``-prefixed block id."""

    if view.has_anchor(anchor):
        return True

    decoded = unquote(anchor)
    if decoded != anchor and view.has_anchor(decoded):
        return True
    if anchor.startswith("^") and view.has_anchor(anchor[1:]):
        return True

    unwrapped = decoded[1:-1] if len(decoded) > 1 and decoded.startswith("`") and decoded.endswith("`") else None
    cleaned = clean_markdown(decoded)
    for definition in view.anchors:
        raw_text = definition.raw_text
        if raw_text is not None and raw_text == decoded:
            return True
        if unwrapped is not None and unwrapped in (raw_text, definition.id):
            return True
        if clean_markdown(raw_text or definition.id) == cleaned:
            return True
    return False


class LinkResolver:
    """Validate every outgoing link of a document against the filesystem and targets.

    Validation never raises for a single bad link: each link gets its own
    outcome. Only an unreadable source document is fatal.
    """

    def __init__(
        self,
        cache: DocumentCache,
        file_lookup: FilenameLookup | None = None,
        *,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> None:
        if suggestion_limit < 1:
            raise ValueError("suggestion_limit must be >= 1")
        self._cache = cache
        self._file_lookup = file_lookup
        self._suggestion_limit = suggestion_limit

    async def validate_document(self, path: str | os.PathLike[str]) -> ValidationResult:
        source = DocumentCache.normalize_key(path)
        view = await self._cache.resolve(source)
        links = view.get_links()

        # gather keeps input order regardless of completion order.
        enriched = await asyncio.gather(*(self.validate_link(link, source) for link in links))
        result = ValidationResult.from_links(source, enriched)
        summary = result.summary
        logger.info(
            "Validated %s: %d links, %d valid, %d warnings, %d errors",
            source,
            summary.total,
            summary.valid,
            summary.warnings,
            summary.errors,
        )
        return result

    async def validate_link(self, link: LinkReference, source_path: str | None = None) -> EnrichedLinkReference:
        source = DocumentCache.normalize_key(source_path or link.source_path)
        if link.scope == "internal":
            return await self._validate_internal(link, source)
        return await self._validate_cross_document(link, source)

    async def _validate_internal(self, link: LinkReference, source: str) -> EnrichedLinkReference:
        if not link.anchor:
            return EnrichedLinkReference.from_link(link, ValidationOutcome.error("Internal link has no anchor"))
        outcome = await self._anchor_outcome(link.anchor, source)
        return EnrichedLinkReference.from_link(link, outcome or ValidationOutcome.valid())

    async def _validate_cross_document(self, link: LinkReference, source: str) -> EnrichedLinkReference:
        raw_path = link.target.raw
        if not raw_path:
            return EnrichedLinkReference.from_link(link, ValidationOutcome.error("Link has no target path"))

        try:
            resolved = self.resolve_target(raw_path, source)
        except PathResolutionFailure as exc:
            return EnrichedLinkReference.from_link(
                link,
                ValidationOutcome.error(str(exc), exc.suggestion, reason=exc.reason),
            )

        relative = relative_link_path(source, resolved.path)
        target = TargetPath(raw=raw_path, absolute=resolved.path, relative=relative)

        if link.anchor:
            miss = await self._anchor_outcome(link.anchor, resolved.path)
            if miss is not None:
                return EnrichedLinkReference.from_link(link, miss, target=target)

        if resolved.strategy == "direct":
            return EnrichedLinkReference.from_link(link, ValidationOutcome.valid(), target=target)

        fragment = f"#{link.anchor}" if link.anchor else ""
        conversion = PathConversion(original=f"{raw_path}{fragment}", recommended=f"{relative}{fragment}")
        message = f"Found via {STRATEGY_LABELS[resolved.strategy]} in different location: {resolved.path}"
        return EnrichedLinkReference.from_link(
            link,
            ValidationOutcome.warning(message, path_conversion=conversion),
            target=target,
        )

    def resolve_target(self, raw_path: str, source_path: str) -> ResolvedPath:
        """Apply the resolution strategies in precedence order.

        Raises :class:`PathResolutionFailure` classified as ``not_found`` or
        ``ambiguous`` with a filename suggestion when every strategy fails.
        """

        resolved = resolve_on_filesystem(raw_path, source_path)
        if resolved is not None:
            return resolved

        filename = os.path.basename(unquote(raw_path))
        lookup_message: str | None = None
        if self._file_lookup is not None:
            lookup = self._file_lookup.resolve(filename)
            if lookup.found and lookup.path:
                return ResolvedPath(path=os.path.normpath(lookup.path), strategy="file-index")
            if lookup.reason == "duplicate":
                raise PathResolutionFailure(raw_path, "ambiguous", lookup.message)
            lookup_message = lookup.message

        raise PathResolutionFailure(raw_path, "not_found", self._filename_suggestion(raw_path, source_path, lookup_message))

    def _filename_suggestion(self, raw_path: str, source_path: str, lookup_message: str | None) -> str:
        expected = standard_path(raw_path, source_path)
        known = sibling_markdown_files(os.path.dirname(expected))
        close = close_filenames(expected, known, limit=self._suggestion_limit)
        if self._file_lookup is not None:
            for name in self._file_lookup.closest(expected, limit=self._suggestion_limit):
                if name not in close:
                    close.append(name)

        parts: list[str] = []
        if close:
            parts.append(f"Did you mean: {', '.join(close[: self._suggestion_limit])}?")
        if lookup_message:
            parts.append(lookup_message)
        parts.append(f"Tried: {expected}")
        return " ".join(parts)

    async def _anchor_outcome(self, anchor: str, target_path: str) -> ValidationOutcome | None:
        """None when ``anchor`` exists in the target, else an error outcome."""

        try:
            view = await self._cache.resolve(target_path)
        except ParseFailure as exc:
            return ValidationOutcome.error(f"Error reading target file: {exc}", reason="parse_failure")

        if anchor_exists(view, anchor):
            return None

        miss = AnchorNotFound(anchor, target_path, self._anchor_suggestion(view, anchor))
        return ValidationOutcome.error(str(miss), miss.suggestion, reason="anchor_not_found")

    def _anchor_suggestion(self, view: ParsedDocumentView, anchor: str) -> str:
        limit = self._suggestion_limit
        similar = view.find_similar_anchors(unquote(anchor), limit=limit)
        headers = [f'"{item.raw_text}" → #{item.id}' for item in view.anchors if item.kind == "header"][:limit]
        blocks = [f"^{item.id}" for item in view.anchors if item.kind == "block"][:limit]

        parts: list[str] = []
        if similar:
            parts.append(f"Available anchors: {', '.join(similar[:3])}")
        if headers:
            parts.append(f"Available headers: {', '.join(headers)}")
        if blocks:
            parts.append(f"Available block refs: {', '.join(blocks)}")
        return "; ".join(parts) if parts else "No similar anchors found"
