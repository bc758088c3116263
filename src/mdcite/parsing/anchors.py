"""Anchor discovery for block references, emphasis markers, and headings."""

from __future__ import annotations

import re
from collections.abc import Sequence

from mdcite.parsing.models import AnchorDefinition, HeadingInfo

_BLOCK_END_RE = re.compile(r"\^([A-Za-z0-9_-]+)$")
_CARET_RE = re.compile(r"\^([A-Za-z0-9-]+)")
_SEMVER_TAIL_RE = re.compile(r"^\.\d")
_EMPHASIS_RE = re.compile(r"==\*\*([^*]+)\*\*==")
_EXPLICIT_ID_RE = re.compile(r"^(.+?)\s*\{#([^}]+)\}$")
_WHITESPACE_RE = re.compile(r"\s+")


def escape_heading_id(text: str) -> str:
    """Alternate link spelling of a heading: colons dropped, spaces as ``%20``."""

    return _WHITESPACE_RE.sub("%20", text.replace(":", ""))


def _line_anchors(line: str, line_no: int) -> list[AnchorDefinition]:
    anchors: list[AnchorDefinition] = []
    stripped = line.rstrip()

    end_match = _BLOCK_END_RE.search(stripped)
    if end_match:
        anchors.append(
            AnchorDefinition(
                kind="block",
                id=end_match.group(1),
                escaped_id=None,
                raw_text=None,
                full_match=end_match.group(0),
                line=line_no,
                column=end_match.start(),
            )
        )

    for match in _CARET_RE.finditer(stripped):
        if end_match and match.start() == end_match.start():
            continue
        if _SEMVER_TAIL_RE.match(stripped[match.end():]):
            continue
        anchors.append(
            AnchorDefinition(
                kind="block",
                id=match.group(1),
                escaped_id=None,
                raw_text=None,
                full_match=match.group(0),
                line=line_no,
                column=match.start(),
            )
        )

    for match in _EMPHASIS_RE.finditer(stripped):
        anchors.append(
            AnchorDefinition(
                kind="block",
                id=match.group(1),
                escaped_id=None,
                raw_text=None,
                full_match=match.group(0),
                line=line_no,
                column=match.start(),
            )
        )

    return anchors


def _heading_anchor(heading: HeadingInfo, lines: Sequence[str]) -> AnchorDefinition:
    declaration = lines[heading.line - 1].rstrip("\n") if 0 < heading.line <= len(lines) else heading.text

    explicit = _EXPLICIT_ID_RE.match(heading.text)
    if explicit:
        explicit_id = explicit.group(2)
        return AnchorDefinition(
            kind="header",
            id=explicit_id,
            escaped_id=None,
            raw_text=explicit.group(1).strip(),
            full_match=declaration,
            line=heading.line,
            column=0,
        )

    escaped = escape_heading_id(heading.text)
    return AnchorDefinition(
        kind="header",
        id=heading.text,
        escaped_id=escaped if escaped != heading.text else None,
        raw_text=heading.text,
        full_match=declaration,
        line=heading.line,
        column=0,
    )


def extract_anchors(
    lines: Sequence[str],
    headings: Sequence[HeadingInfo],
    code_lines: set[int],
) -> tuple[AnchorDefinition, ...]:
    """Collect every anchor declared by a document.

    Block-style anchors are scanned per line (code block lines excluded);
    header anchors come from the heading list, one per heading.
    """

    anchors: list[AnchorDefinition] = []
    for index, line in enumerate(lines):
        line_no = index + 1
        if line_no in code_lines:
            continue
        anchors.extend(_line_anchors(line, line_no))

    anchors.extend(_heading_anchor(heading, lines) for heading in headings)
    return tuple(anchors)
