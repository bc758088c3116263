from __future__ import annotations

import pytest

from mdcite.parsing.links import build_link
from mdcite.parsing.models import TargetPath
from mdcite.validation.models import (
    EnrichedLinkReference,
    PathConversion,
    ValidationOutcome,
    ValidationResult,
)


def _link(line: int = 1, raw_path: str = "x.md"):
    return build_link(
        syntax="markdown",
        scope="cross-document",
        raw_path=raw_path,
        anchor="Setup",
        source_path="/docs/page.md",
        text="x",
        full_match=f"[x]({raw_path}#Setup)",
        line=line,
        column=0,
    )


def test_outcome_variants_enforce_message_rules() -> None:
    with pytest.raises(ValueError):
        ValidationOutcome(status="valid", message="unexpected")
    with pytest.raises(ValueError):
        ValidationOutcome(status="error")
    with pytest.raises(ValueError):
        ValidationOutcome(status="warning", message="moved", reason="not_found")
    with pytest.raises(ValueError):
        ValidationOutcome(status="valid", reason="ambiguous")

    conversion = PathConversion(original="docs/x.md", recommended="../x.md")
    warning = ValidationOutcome.warning("Found elsewhere", path_conversion=conversion)

    assert ValidationOutcome.valid().to_dict() == {"status": "valid"}
    assert warning.to_dict() == {
        "status": "warning",
        "message": "Found elsewhere",
        "pathConversion": {"type": "path-conversion", "original": "docs/x.md", "recommended": "../x.md"},
    }


def test_enrichment_creates_new_record_without_touching_the_link() -> None:
    link = _link()
    target = TargetPath(raw="x.md", absolute="/elsewhere/x.md", relative="../elsewhere/x.md")

    enriched = EnrichedLinkReference.from_link(link, ValidationOutcome.error("File not found: x.md"), target=target)

    assert enriched.target == target
    assert link.target.absolute == "/docs/x.md"
    assert enriched.full_match == link.full_match
    assert enriched.to_dict()["validation"] == {"status": "error", "message": "File not found: x.md"}
    assert enriched.to_dict()["target"]["path"]["absolute"] == "/elsewhere/x.md"


def test_summary_is_derived_from_links() -> None:
    links = [
        EnrichedLinkReference.from_link(_link(1), ValidationOutcome.valid()),
        EnrichedLinkReference.from_link(_link(2), ValidationOutcome.warning("moved")),
        EnrichedLinkReference.from_link(_link(3), ValidationOutcome.error("missing")),
        EnrichedLinkReference.from_link(_link(4), ValidationOutcome.error("missing")),
    ]

    result = ValidationResult.from_links("/docs/page.md", links)
    payload = result.to_dict()

    assert payload["summary"] == {"total": 4, "valid": 1, "warnings": 1, "errors": 2}
    assert [item["line"] for item in payload["links"]] == [1, 2, 3, 4]
    assert payload["file"] == "/docs/page.md"
