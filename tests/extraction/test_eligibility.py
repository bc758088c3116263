from __future__ import annotations

from mdcite.extraction.eligibility import (
    DEFAULT_RULES,
    EligibilityChain,
    anchored_link_rule,
    force_marker_rule,
    full_file_flag_rule,
    stop_marker_rule,
)
from mdcite.extraction.models import ExtractionOptions
from mdcite.parsing.links import build_link
from mdcite.parsing.models import ExtractionMarker


def _link(anchor: str | None = None, marker: str | None = None):
    extraction_marker = None
    if marker is not None:
        extraction_marker = ExtractionMarker(kind=marker, full_match=f"%%{marker}%%")
    return build_link(
        syntax="markdown",
        scope="cross-document",
        raw_path="x.md",
        anchor=anchor,
        source_path="/docs/page.md",
        text="x",
        full_match="[x](x.md)",
        line=1,
        column=0,
        extraction_marker=extraction_marker,
    )


def test_default_rule_order() -> None:
    assert DEFAULT_RULES == (stop_marker_rule, force_marker_rule, anchored_link_rule, full_file_flag_rule)


def test_stop_marker_beats_anchor_default() -> None:
    decision = EligibilityChain().decide(_link("Setup", "stop"), ExtractionOptions(full_files=True))

    assert not decision.eligible
    assert decision.reason == "stop-extract-link marker prevents extraction"


def test_force_marker_beats_missing_full_files_flag() -> None:
    decision = EligibilityChain().decide(_link(None, "force"), ExtractionOptions(full_files=False))

    assert decision.eligible
    assert decision.reason == "force-extract overrides defaults"


def test_anchored_links_are_eligible_by_default() -> None:
    header = EligibilityChain().decide(_link("Setup"), ExtractionOptions())
    block = EligibilityChain().decide(_link("^blk"), ExtractionOptions())

    assert header.eligible and block.eligible
    assert header.reason == "Markdown anchor links eligible by default"


def test_full_file_links_follow_the_flag() -> None:
    chain = EligibilityChain()

    off = chain.decide(_link(), ExtractionOptions())
    on = chain.decide(_link(), ExtractionOptions(full_files=True))

    assert not off.eligible
    assert off.reason == "Full-file link ineligible without full_files option"
    assert on.eligible
    assert on.reason == "Full-file extraction enabled (full_files option)"


def test_fallback_when_no_rule_applies() -> None:
    decision = EligibilityChain([stop_marker_rule]).decide(_link("Setup"), ExtractionOptions())

    assert not decision.eligible
    assert decision.reason == "No rule matched"
