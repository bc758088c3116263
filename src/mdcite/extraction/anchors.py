"""Anchor normalization before content is cut out of a target."""

from __future__ import annotations

from urllib.parse import unquote

from mdcite.documents.view import ParsedDocumentView


def decode_anchor(anchor: str) -> str:
    """URL-decode an escaped-form anchor (``Setup%20Guide`` -> ``Setup Guide``)."""

    return unquote(anchor)


def normalize_block_id(anchor: str) -> str:
    return anchor[1:] if anchor.startswith("^") else anchor


def heading_for_anchor(view: ParsedDocumentView, anchor: str) -> str:
    """Map a header anchor to the heading text it addresses.

    Escaped spellings drop colons, and explicit ``{#id}`` anchors differ from
    the heading entirely, so the declared header anchor is consulted first.
    """

    decoded = decode_anchor(anchor)
    for definition in view.anchors:
        if definition.kind != "header":
            continue
        if definition.matches(anchor) or definition.matches(decoded):
            for heading in view.headings:
                if heading.line == definition.line:
                    return heading.text
            return definition.raw_text or decoded
    return decoded
