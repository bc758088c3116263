"""Read-only query facade over one document's parse output."""

from __future__ import annotations

from difflib import SequenceMatcher
from functools import cached_property

from mdcite.errors import ExtractionFailure
from mdcite.parsing.models import AnchorDefinition, HeadingInfo, LinkReference, RawParseOutput
from mdcite.parsing.tokenizer import heading_text, iter_leaf_blocks

SIMILARITY_THRESHOLD = 0.3
MAX_SIMILAR_ANCHORS = 5


def similarity(left: str, right: str) -> float:
    """Case-insensitive edit similarity in [0..1]; 1.0 means identical."""

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    return SequenceMatcher(None, left.lower(), right.lower()).ratio()


class ParsedDocumentView:
    """Stable queries for anchor validation and content extraction.

    Wraps a :class:`RawParseOutput` without exposing the token tree. Derived
    indexes (anchor ids, line offsets, leaf spans) are computed on first use.
    """

    def __init__(self, parse_output: RawParseOutput) -> None:
        self._data = parse_output

    @property
    def path(self) -> str:
        return self._data.path

    @property
    def anchors(self) -> tuple[AnchorDefinition, ...]:
        return self._data.anchors

    @property
    def headings(self) -> tuple[HeadingInfo, ...]:
        return self._data.headings

    def has_anchor(self, anchor_id: str) -> bool:
        """True when ``anchor_id`` matches a raw or escaped anchor identifier."""

        return any(anchor.matches(anchor_id) for anchor in self._data.anchors)

    def find_similar_anchors(self, anchor_id: str, *, limit: int = MAX_SIMILAR_ANCHORS) -> list[str]:
        scored = [
            (similarity(anchor_id, candidate), candidate)
            for candidate in self.anchor_ids
        ]
        matches = [item for item in scored if item[0] > SIMILARITY_THRESHOLD]
        matches.sort(key=lambda item: item[0], reverse=True)
        return [candidate for _, candidate in matches[:limit]]

    def get_links(self) -> tuple[LinkReference, ...]:
        return self._data.links

    @cached_property
    def anchor_ids(self) -> tuple[str, ...]:
        ids: dict[str, None] = {}
        for anchor in self._data.anchors:
            ids.setdefault(anchor.id)
            if anchor.kind == "header" and anchor.escaped_id:
                ids.setdefault(anchor.escaped_id)
        return tuple(ids)

    def extract_full_content(self) -> str:
        return self._data.content

    def extract_section(self, heading: str) -> str | None:
        """Return the section under ``heading``, or None when no heading matches.

        The section starts at the heading and ends before the next heading of
        equal or shallower depth (or at end of document), so deeper
        sub-headings are included. Matching is exact and case-sensitive.
        When several headings share the text, the first one wins.
        """

        leaves = self._leaves
        start_index: int | None = None
        start_level = 0
        for index, leaf in enumerate(leaves):
            if leaf.type == "heading" and heading_text(leaf) == heading:
                start_index = index
                start_level = _heading_level(leaf)
                break
        if start_index is None:
            return None

        end_index = len(leaves)
        for index in range(start_index + 1, len(leaves)):
            leaf = leaves[index]
            if leaf.type == "heading" and _heading_level(leaf) <= start_level:
                end_index = index
                break

        spans = self._leaf_spans
        return "".join(spans[start_index:end_index])

    def extract_block(self, anchor_id: str) -> str | None:
        """Return the single source line carrying block anchor ``anchor_id``."""

        anchor = next(
            (item for item in self._data.anchors if item.kind == "block" and item.id == anchor_id),
            None,
        )
        if anchor is None:
            return None

        lines = self._data.content.split("\n")
        index = anchor.line - 1
        if index < 0 or index >= len(lines):
            raise ExtractionFailure(
                "invalid_block_index",
                f"Block anchor ^{anchor_id} points at line {anchor.line} outside the document",
            )
        return lines[index]

    @cached_property
    def _leaves(self) -> list:
        return iter_leaf_blocks(self._data.tokens)

    @cached_property
    def _line_offsets(self) -> list[int]:
        offsets = [0]
        for line in self._data.content.split("\n"):
            offsets.append(offsets[-1] + len(line) + 1)
        return offsets

    @cached_property
    def _leaf_spans(self) -> list[str]:
        """Source text of each leaf block, running up to the next leaf."""

        content = self._data.content
        starts = [self._offset(leaf.map[0]) for leaf in self._leaves]
        ends = starts[1:] + [len(content)]
        return [content[start:end] for start, end in zip(starts, ends)]

    def _offset(self, line_index: int) -> int:
        offsets = self._line_offsets
        if line_index >= len(offsets):
            return len(self._data.content)
        return min(offsets[line_index], len(self._data.content))


def _heading_level(leaf) -> int:
    return int(leaf.tag[1:])
