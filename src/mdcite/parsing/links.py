"""Line-oriented discovery of markdown, wiki, and cite references."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence

from mdcite.parsing.models import (
    AnchorKind,
    ExtractionMarker,
    LinkReference,
    LinkScope,
    LinkSyntax,
    TargetPath,
)

# Anchors may carry spaces, colons and up to two levels of nested parentheses.
_NESTED_PARENS = r"(?:[^()]|\((?:[^()]|\([^)]*\))*\))+"
_MARKDOWN_LINK_RE = re.compile(rf"(!?)\[([^\]]*)\]\(({_NESTED_PARENS})\)")
_WIKI_CROSS_RE = re.compile(r"\[\[([^#\]|]+\.md)(?:#([^|\]]+))?(?:\|([^\]]+))?\]\]")
_WIKI_INTERNAL_RE = re.compile(r"\[\[#([^|\]]+)(?:\|([^\]]+))?\]\]")
_CITE_RE = re.compile(r"\[cite:\s*([^\]]+)\]")
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")
_MARKER_RE = re.compile(r"\s*(%%(.+?)%%|<!--\s*(.+?)\s*-->)")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_TITLE_RE = re.compile(r"\s+(\"[^\"]*\"|'[^']*')\s*$")

_MARKER_KINDS = {
    "force-extract": "force",
    "stop-extract-link": "stop",
}


def determine_anchor_kind(anchor: str | None) -> AnchorKind | None:
    """Classify an anchor as a block reference (``^id``) or a header."""

    if not anchor:
        return None
    if anchor.startswith("^"):
        return "block"
    return "header"


def detect_extraction_marker(line: str, link_end: int) -> ExtractionMarker | None:
    """Return the extraction marker following a link on the same line."""

    match = _MARKER_RE.search(line[link_end:])
    if match is None:
        return None
    inner = (match.group(2) or match.group(3) or "").strip()
    kind = _MARKER_KINDS.get(inner)
    if kind is None:
        return None
    return ExtractionMarker(kind=kind, full_match=match.group(1))


def build_link(
    *,
    syntax: LinkSyntax,
    scope: LinkScope,
    raw_path: str | None,
    anchor: str | None,
    source_path: str,
    text: str | None,
    full_match: str,
    line: int,
    column: int,
    extraction_marker: ExtractionMarker | None = None,
) -> LinkReference:
    """Single construction point for link references."""

    absolute: str | None = None
    relative: str | None = None
    if raw_path:
        if os.path.isabs(raw_path):
            absolute = os.path.normpath(raw_path)
        else:
            absolute = os.path.normpath(os.path.join(os.path.dirname(source_path), raw_path))
        relative = os.path.relpath(absolute, os.path.dirname(source_path)).replace(os.sep, "/")

    return LinkReference(
        syntax=syntax,
        scope=scope,
        anchor_kind=determine_anchor_kind(anchor),
        source_path=source_path,
        target=TargetPath(raw=raw_path, absolute=absolute, relative=relative),
        anchor=anchor,
        text=text,
        full_match=full_match,
        line=line,
        column=column,
        extraction_marker=extraction_marker,
    )


def _code_span_ranges(line: str) -> list[tuple[int, int]]:
    return [(match.start(), match.end()) for match in _CODE_SPAN_RE.finditer(line)]


def _inside(position: int, ranges: Sequence[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in ranges)


def _split_target(target: str) -> tuple[str | None, str | None] | None:
    cleaned = _TITLE_RE.sub("", target.strip())
    if cleaned.startswith("<") and cleaned.endswith(">"):
        cleaned = cleaned[1:-1].strip()
    if not cleaned or cleaned.startswith("^") or _SCHEME_RE.match(cleaned):
        return None
    if cleaned.startswith("#"):
        return None, cleaned[1:] or None
    path, sep, anchor = cleaned.partition("#")
    return path or None, (anchor or None) if sep else None


def _scan_line(line: str, line_no: int, source_path: str) -> Iterable[LinkReference]:
    code_ranges = _code_span_ranges(line)

    for match in _MARKDOWN_LINK_RE.finditer(line):
        if match.group(1) or _inside(match.start(), code_ranges):
            continue
        split = _split_target(match.group(3))
        if split is None:
            continue
        raw_path, anchor = split
        if raw_path is None and anchor is None:
            continue
        yield build_link(
            syntax="markdown",
            scope="cross-document" if raw_path else "internal",
            raw_path=raw_path,
            anchor=anchor,
            source_path=source_path,
            text=match.group(2),
            full_match=match.group(0),
            line=line_no,
            column=match.start(),
            extraction_marker=detect_extraction_marker(line, match.end()),
        )

    for match in _WIKI_CROSS_RE.finditer(line):
        if _inside(match.start(), code_ranges):
            continue
        yield build_link(
            syntax="wiki",
            scope="cross-document",
            raw_path=match.group(1).strip(),
            anchor=match.group(2),
            source_path=source_path,
            text=match.group(3),
            full_match=match.group(0),
            line=line_no,
            column=match.start(),
            extraction_marker=detect_extraction_marker(line, match.end()),
        )

    for match in _WIKI_INTERNAL_RE.finditer(line):
        if _inside(match.start(), code_ranges):
            continue
        yield build_link(
            syntax="wiki",
            scope="internal",
            raw_path=None,
            anchor=match.group(1),
            source_path=source_path,
            text=match.group(2),
            full_match=match.group(0),
            line=line_no,
            column=match.start(),
            extraction_marker=detect_extraction_marker(line, match.end()),
        )

    for match in _CITE_RE.finditer(line):
        if _inside(match.start(), code_ranges):
            continue
        raw_path = match.group(1).strip()
        yield build_link(
            syntax="markdown",
            scope="cross-document",
            raw_path=raw_path,
            anchor=None,
            source_path=source_path,
            text=f"cite: {raw_path}",
            full_match=match.group(0),
            line=line_no,
            column=match.start(),
            extraction_marker=detect_extraction_marker(line, match.end()),
        )


def extract_links(lines: Sequence[str], source_path: str, code_lines: set[int]) -> tuple[LinkReference, ...]:
    """Collect links from source lines, skipping lines inside code blocks.

    ``code_lines`` holds 1-based line numbers. The result is ordered by
    position and holds at most one link per (line, column).
    """

    found: dict[tuple[int, int], LinkReference] = {}
    for index, line in enumerate(lines):
        line_no = index + 1
        if line_no in code_lines:
            continue
        for link in _scan_line(line, line_no, source_path):
            found.setdefault((link.line, link.column), link)
    return tuple(found[key] for key in sorted(found))
