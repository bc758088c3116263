"""Markdown tokenizer producing the canonical parse output for one file."""

from __future__ import annotations

import logging
from pathlib import Path

from charset_normalizer import from_bytes
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdcite.errors import ParseFailure
from mdcite.parsing.anchors import extract_anchors
from mdcite.parsing.links import extract_links
from mdcite.parsing.models import HeadingInfo, RawParseOutput

logger = logging.getLogger(__name__)

CONTAINER_TYPES = frozenset({"root", "blockquote", "bullet_list", "ordered_list", "list_item"})
_CODE_TYPES = frozenset({"fence", "code_block"})


def iter_leaf_blocks(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    """Flatten a syntax tree into its leaf blocks in document order.

    Containers (block quotes, lists, list items) are walked; every other
    block, headings and paragraphs included, is a leaf whose source span
    already covers its inline children.
    """

    leaves: list[SyntaxTreeNode] = []

    def _walk(current: SyntaxTreeNode) -> None:
        for child in current.children:
            if child.type in CONTAINER_TYPES:
                _walk(child)
            elif child.map is not None:
                leaves.append(child)

    _walk(node)
    return leaves


def heading_text(node: SyntaxTreeNode) -> str:
    return "".join(child.content for child in node.children if child.type == "inline").strip()


class MarkdownTokenizer:
    """Read and tokenize markdown files with robust charset handling."""

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark").enable("table")

    def parse(self, path: str | Path) -> RawParseOutput:
        source = Path(path)
        try:
            raw = source.read_bytes()
        except OSError as exc:
            raise ParseFailure(str(source), f"Failed to read document: {exc}") from exc

        try:
            content = self._decode(raw)
        except ValueError as exc:
            raise ParseFailure(str(source), str(exc)) from exc
        return self.parse_text(content, str(source))

    def parse_text(self, content: str, path: str) -> RawParseOutput:
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        root = SyntaxTreeNode(self._md.parse(content))
        lines = content.split("\n")
        leaves = iter_leaf_blocks(root)

        code_lines: set[int] = set()
        headings: list[HeadingInfo] = []
        for leaf in leaves:
            start, end = leaf.map
            if leaf.type in _CODE_TYPES:
                code_lines.update(range(start + 1, end + 1))
            elif leaf.type == "heading":
                headings.append(HeadingInfo(level=int(leaf.tag[1:]), text=heading_text(leaf), line=start + 1))

        links = extract_links(lines, path, code_lines)
        anchors = extract_anchors(lines, headings, code_lines)
        logger.debug("Parsed %s: %d links, %d anchors, %d headings", path, len(links), len(anchors), len(headings))

        return RawParseOutput(
            path=path,
            content=content,
            tokens=root,
            links=links,
            anchors=anchors,
            headings=tuple(headings),
        )

    def _decode(self, raw: bytes) -> str:
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        best = from_bytes(raw).best()
        if best and best.encoding:
            return raw.decode(best.encoding)
        raise ValueError("Could not detect document encoding")
