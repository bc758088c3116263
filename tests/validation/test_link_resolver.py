from __future__ import annotations

import asyncio
import os
from pathlib import Path

from mdcite.documents.cache import DocumentCache
from mdcite.lookup.file_index import FileIndex
from mdcite.parsing.tokenizer import MarkdownTokenizer
from mdcite.validation.resolver import LinkResolver, anchor_exists, clean_markdown

TARGET = (
    "# Target\n"
    "\n"
    "## Setup Guide\n"
    "\n"
    "Install things.\n"
    "\n"
    "Important sentence ^blk1\n"
)

SOURCE = (
    "# Guide\n"
    "\n"
    "See [setup](target.md#Setup%20Guide) for details.\n"
    "Also [missing](target.md#Nope) here.\n"
    "And [gone](targt.md) too.\n"
    "Jump [local](#Guide) now.\n"
    "Block [ref](target.md#^blk1) ok.\n"
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _resolver(file_index: FileIndex | None = None) -> LinkResolver:
    return LinkResolver(DocumentCache(MarkdownTokenizer()), file_index)


def test_validate_document_enriches_every_link(tmp_path: Path) -> None:
    _write(tmp_path / "target.md", TARGET)
    source = _write(tmp_path / "guide.md", SOURCE)

    result = asyncio.run(_resolver().validate_document(source))

    statuses = [(link.line, link.validation.status) for link in result.links]
    assert statuses == [(3, "valid"), (4, "error"), (5, "error"), (6, "valid"), (7, "valid")]

    summary = result.summary
    assert summary.total == len(result.links) == 5
    assert summary.valid + summary.warnings + summary.errors == summary.total
    assert (summary.valid, summary.warnings, summary.errors) == (3, 0, 2)

    valid = result.links[0]
    assert valid.target.absolute == str(tmp_path / "target.md")
    assert valid.target.relative == "target.md"


def test_anchor_miss_is_an_error_with_suggestions(tmp_path: Path) -> None:
    _write(tmp_path / "target.md", TARGET)
    source = _write(tmp_path / "guide.md", SOURCE)

    result = asyncio.run(_resolver().validate_document(source))
    miss = result.links[1].validation

    assert miss.message == "Anchor not found: #Nope"
    assert miss.reason == "anchor_not_found"
    assert miss.suggestion is not None
    assert '"Setup Guide" → #Setup Guide' in miss.suggestion
    assert "^blk1" in miss.suggestion


def test_missing_file_suggests_closest_sibling(tmp_path: Path) -> None:
    _write(tmp_path / "target.md", TARGET)
    source = _write(tmp_path / "guide.md", SOURCE)

    result = asyncio.run(_resolver().validate_document(source))
    gone = result.links[2].validation

    assert gone.message == "File not found: targt.md"
    assert gone.reason == "not_found"
    assert gone.to_dict()["reason"] == "not_found"
    assert gone.suggestion is not None
    assert gone.suggestion.startswith("Did you mean: target.md?")
    assert gone.suggestion.endswith(f"Tried: {tmp_path / 'targt.md'}")


def test_repository_root_path_resolves_with_warning(tmp_path: Path) -> None:
    _write(tmp_path / "docs" / "other.md", "# Other\n\n## Intro\n\nHello.\n")
    source = _write(tmp_path / "docs" / "sub" / "page.md", "Read [o](docs/other.md#Intro).\n")

    result = asyncio.run(_resolver().validate_document(source))
    (link,) = result.links

    assert link.validation.status == "warning"
    assert link.validation.message == (
        f"Found via repository-root path in different location: {tmp_path / 'docs' / 'other.md'}"
    )
    conversion = link.validation.path_conversion
    assert conversion is not None
    assert conversion.original == "docs/other.md#Intro"
    assert conversion.recommended == "../other.md#Intro"
    assert link.target.raw == "docs/other.md"
    assert link.target.absolute == str(tmp_path / "docs" / "other.md")


def test_symlinked_source_resolves_against_real_directory(tmp_path: Path) -> None:
    _write(tmp_path / "real" / "page.md", "See [o](other.md).\n")
    _write(tmp_path / "real" / "other.md", "# Other\n")
    (tmp_path / "alias").mkdir()
    os.symlink(tmp_path / "real" / "page.md", tmp_path / "alias" / "page.md")

    result = asyncio.run(_resolver().validate_document(tmp_path / "alias" / "page.md"))
    (link,) = result.links

    assert link.validation.status == "warning"
    assert "symlink-resolved source directory" in (link.validation.message or "")
    assert link.target.absolute == str(tmp_path / "real" / "other.md")


def test_file_index_is_the_last_resort(tmp_path: Path) -> None:
    _write(tmp_path / "notes" / "elsewhere.md", "# Elsewhere\n")
    _write(tmp_path / "a" / "dup.md", "# A\n")
    _write(tmp_path / "b" / "dup.md", "# B\n")
    source = _write(tmp_path / "docs" / "page.md", "[e](elsewhere.md) and [d](dup.md)\n")
    index = FileIndex()
    index.build(tmp_path)

    result = asyncio.run(_resolver(index).validate_document(source))
    found, ambiguous = result.links

    assert found.validation.status == "warning"
    assert "file index" in (found.validation.message or "")
    assert found.target.absolute == str((tmp_path / "notes" / "elsewhere.md").resolve())
    assert ambiguous.validation.status == "error"
    assert ambiguous.validation.message == "Ambiguous file reference: dup.md"
    assert ambiguous.validation.reason == "ambiguous"
    assert found.validation.reason is None


def test_unreadable_source_is_fatal(tmp_path: Path) -> None:
    from mdcite.errors import ParseFailure

    try:
        asyncio.run(_resolver().validate_document(tmp_path / "absent.md"))
    except ParseFailure as exc:
        assert exc.path == str(tmp_path / "absent.md")
    else:
        raise AssertionError("missing source should raise ParseFailure")


def test_anchor_matching_accepts_alternate_spellings() -> None:
    from mdcite.documents.view import ParsedDocumentView

    view = ParsedDocumentView(
        MarkdownTokenizer().parse_text("## Step 1: Install\n\n## `config.yaml`\n\n## **Bold** Title\n", "/d/x.md")
    )

    assert anchor_exists(view, "Step%201%20Install")
    assert anchor_exists(view, "Step 1: Install")
    assert anchor_exists(view, "config.yaml")
    assert anchor_exists(view, "Bold Title")
    assert not anchor_exists(view, "Uninstall")
    assert clean_markdown("**Bold** `code` ==mark==") == "Bold code mark"
