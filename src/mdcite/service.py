"""Run context wiring the cache, resolver, and extraction engine together."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
import logging
import os
import re
from pathlib import Path

from mdcite.config import CiteSettings
from mdcite.documents.cache import DocumentCache
from mdcite.errors import AnchorNotFound, ParseFailure, PathResolutionFailure
from mdcite.extraction.eligibility import EligibilityChain
from mdcite.extraction.engine import ExtractionEngine
from mdcite.extraction.models import ExtractionOptions, ExtractionResult
from mdcite.lookup.file_index import FileIndex, FileIndexStats, FilenameLookup
from mdcite.parsing.base import DocumentTokenizer
from mdcite.parsing.factory import create_file_link, create_header_link
from mdcite.parsing.tokenizer import MarkdownTokenizer
from mdcite.validation.models import EnrichedLinkReference, ValidationResult
from mdcite.validation.resolver import LinkResolver

logger = logging.getLogger(__name__)

_LINE_RANGE_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


def parse_line_range(raw_range: str) -> tuple[int, int]:
    """Parse ``"10-20"`` (or a single ``"10"``) into an inclusive line range."""

    match = _LINE_RANGE_RE.match(raw_range)
    if match is None:
        raise ValueError(f"Invalid line range: {raw_range!r} (expected START-END)")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    if start < 1 or end < start:
        raise ValueError(f"Invalid line range: {raw_range!r}")
    return start, end


def filter_by_line_range(result: ValidationResult, raw_range: str) -> ValidationResult:
    start, end = parse_line_range(raw_range)
    kept = [link for link in result.links if start <= link.line <= end]
    return ValidationResult.from_links(result.file, kept)


class CitationService:
    """One validation/extraction run over a set of markdown documents.

    The service owns a single :class:`DocumentCache`, so every document is
    parsed at most once for as long as the service lives. All coroutine
    methods must run on the same event loop.
    """

    def __init__(
        self,
        settings: CiteSettings | None = None,
        *,
        tokenizer: DocumentTokenizer | None = None,
        file_index: FilenameLookup | None = None,
    ) -> None:
        self._settings = settings or CiteSettings()
        self._cache = DocumentCache(tokenizer or MarkdownTokenizer())
        self._file_index = file_index
        self._engine = ExtractionEngine(self._cache, EligibilityChain())
        self._resolver = self._build_resolver()
        if file_index is None and self._settings.scope is not None:
            self.build_file_index(self._settings.scope)

    @property
    def settings(self) -> CiteSettings:
        return self._settings

    @property
    def cache(self) -> DocumentCache:
        return self._cache

    def default_options(self) -> ExtractionOptions:
        return ExtractionOptions(full_files=self._settings.full_files)

    def build_file_index(self, scope: str | os.PathLike[str]) -> FileIndexStats:
        index = FileIndex()
        stats = index.build(Path(scope))
        self._file_index = index
        self._resolver = self._build_resolver()
        logger.info("Indexed %d markdown files under %s", stats.total_files, stats.scope_folder)
        return stats

    async def validate_document(self, path: str | os.PathLike[str]) -> ValidationResult:
        return await self._resolver.validate_document(path)

    async def extract_from_document(
        self,
        path: str | os.PathLike[str],
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult:
        validation = await self.validate_document(path)
        return await self.extract_from_links(validation.links, options)

    async def extract_from_links(
        self,
        links: Sequence[EnrichedLinkReference],
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult:
        return await self._engine.extract(links, options or self.default_options())

    async def extract_header(
        self,
        target: str | os.PathLike[str],
        heading: str,
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult:
        link = create_header_link(os.fspath(target), heading)
        enriched = await self._resolver.validate_link(link)
        self._raise_for_error(enriched)
        return await self.extract_from_links([enriched], options)

    async def extract_file(
        self,
        target: str | os.PathLike[str],
        options: ExtractionOptions | None = None,
    ) -> ExtractionResult:
        link = create_file_link(os.fspath(target))
        enriched = await self._resolver.validate_link(link)
        self._raise_for_error(enriched)
        forced = replace(options or self.default_options(), full_files=True)
        return await self.extract_from_links([enriched], forced)

    def filter_by_line_range(self, result: ValidationResult, raw_range: str) -> ValidationResult:
        return filter_by_line_range(result, raw_range)

    def _build_resolver(self) -> LinkResolver:
        return LinkResolver(
            self._cache,
            self._file_index,
            suggestion_limit=self._settings.suggestion_limit,
        )

    @staticmethod
    def _raise_for_error(link: EnrichedLinkReference) -> None:
        outcome = link.validation
        if outcome.status != "error":
            return
        target = link.target.absolute or link.target.raw or ""
        message = outcome.message or ""
        if outcome.reason == "anchor_not_found" and link.anchor:
            raise AnchorNotFound(link.anchor, target, outcome.suggestion)
        if outcome.reason == "parse_failure":
            raise ParseFailure(target, message)
        if outcome.reason == "ambiguous":
            raise PathResolutionFailure(link.target.raw or target, "ambiguous", outcome.suggestion)
        raise PathResolutionFailure(link.target.raw or target, "not_found", outcome.suggestion)
