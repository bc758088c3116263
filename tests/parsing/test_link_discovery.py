from __future__ import annotations

from mdcite.parsing.links import build_link, detect_extraction_marker, determine_anchor_kind, extract_links

SOURCE = "/docs/src/page.md"


def _links(*lines: str, code_lines: set[int] | None = None):
    return extract_links(list(lines), SOURCE, code_lines or set())


def test_markdown_links_resolve_relative_to_source() -> None:
    (link,) = _links("Read [parent](../shared/x.md#Setup) first.")

    assert link.scope == "cross-document"
    assert link.anchor_kind == "header"
    assert link.target.raw == "../shared/x.md"
    assert link.target.absolute == "/docs/shared/x.md"
    assert link.target.relative == "../shared/x.md"
    assert link.text == "parent"
    assert link.full_match == "[parent](../shared/x.md#Setup)"
    assert (link.line, link.column) == (1, 5)


def test_internal_and_block_links_are_classified() -> None:
    internal, block = _links("[jump](#Local) and [b](x.md#^blk)")

    assert internal.scope == "internal"
    assert internal.target.raw is None
    assert internal.anchor == "Local"

    assert block.anchor_kind == "block"
    assert block.anchor == "^blk"


def test_images_external_urls_and_code_spans_are_skipped() -> None:
    links = _links(
        "![img](pic.png) [site](https://example.com) `[code](y.md)`",
        "[kept](kept.md)",
    )

    assert [link.target.raw for link in links] == ["kept.md"]


def test_lines_inside_code_blocks_are_skipped() -> None:
    links = _links("```", "[x](x.md)", "```", "[y](y.md)", code_lines={1, 2, 3})

    assert [link.target.raw for link in links] == ["y.md"]


def test_anchor_with_nested_parentheses() -> None:
    (link,) = _links("[x](x.md#Step (one))")

    assert link.anchor == "Step (one)"


def test_wiki_and_cite_syntaxes() -> None:
    cross, internal, cite = _links("[[other.md#Usage|usage]] [[#Top]] [cite: refs/a.md]")

    assert (cross.syntax, cross.target.raw, cross.anchor, cross.text) == ("wiki", "other.md", "Usage", "usage")
    assert (internal.scope, internal.anchor, internal.text) == ("internal", "Top", None)
    assert (cite.target.raw, cite.anchor, cite.anchor_kind) == ("refs/a.md", None, None)


def test_extraction_markers_follow_the_link() -> None:
    stopped, forced, plain = _links(
        "[a](x.md#S) %%stop-extract-link%%",
        "[b](y.md) <!-- force-extract -->",
        "[c](z.md) %%something-else%%",
    )

    assert stopped.extraction_marker is not None
    assert stopped.extraction_marker.kind == "stop"
    assert forced.extraction_marker is not None
    assert forced.extraction_marker.kind == "force"
    assert plain.extraction_marker is None


def test_marker_before_link_is_ignored() -> None:
    line = "%%force-extract%% [a](x.md)"

    assert detect_extraction_marker(line, len(line)) is None


def test_anchor_kind_and_link_dict_contract() -> None:
    assert determine_anchor_kind(None) is None
    assert determine_anchor_kind("^id") == "block"
    assert determine_anchor_kind("Heading") == "header"

    link = build_link(
        syntax="markdown",
        scope="cross-document",
        raw_path="x.md",
        anchor="Setup",
        source_path=SOURCE,
        text="x",
        full_match="[x](x.md#Setup)",
        line=3,
        column=0,
    )
    payload = link.to_dict()

    assert payload["linkType"] == "markdown"
    assert payload["anchorType"] == "header"
    assert payload["source"] == {"path": {"absolute": SOURCE}}
    assert payload["target"] == {
        "path": {"raw": "x.md", "absolute": "/docs/src/x.md", "relative": "x.md"},
        "anchor": "Setup",
    }
    assert payload["extractionMarker"] is None


def test_bare_caret_references_are_not_links() -> None:
    assert _links("Requirement [x](^FR1) applies.") == ()
