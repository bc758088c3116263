"""Priority-ordered rules deciding whether a link's content is extracted."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from mdcite.extraction.models import EligibilityDecision, ExtractionOptions
from mdcite.parsing.models import LinkReference

FALLBACK_DECISION = EligibilityDecision(eligible=False, reason="No rule matched")


class EligibilityRule(Protocol):
    """A rule returns a decision when it applies, or None to defer to the next rule."""

    def __call__(self, link: LinkReference, options: ExtractionOptions) -> EligibilityDecision | None: ...


def stop_marker_rule(link: LinkReference, options: ExtractionOptions) -> EligibilityDecision | None:
    if link.extraction_marker is not None and link.extraction_marker.kind == "stop":
        return EligibilityDecision(eligible=False, reason="stop-extract-link marker prevents extraction")
    return None


def force_marker_rule(link: LinkReference, options: ExtractionOptions) -> EligibilityDecision | None:
    if link.extraction_marker is not None and link.extraction_marker.kind == "force":
        return EligibilityDecision(eligible=True, reason="force-extract overrides defaults")
    return None


def anchored_link_rule(link: LinkReference, options: ExtractionOptions) -> EligibilityDecision | None:
    if link.anchor_kind is not None:
        return EligibilityDecision(eligible=True, reason="Markdown anchor links eligible by default")
    return None


def full_file_flag_rule(link: LinkReference, options: ExtractionOptions) -> EligibilityDecision | None:
    if link.anchor_kind is not None:
        return None
    if options.full_files:
        return EligibilityDecision(eligible=True, reason="Full-file extraction enabled (full_files option)")
    return EligibilityDecision(eligible=False, reason="Full-file link ineligible without full_files option")


# Markers dominate the anchor default, which dominates the full-file flag.
DEFAULT_RULES: tuple[EligibilityRule, ...] = (
    stop_marker_rule,
    force_marker_rule,
    anchored_link_rule,
    full_file_flag_rule,
)


class EligibilityChain:
    """Evaluate rules in order; the first non-None decision wins."""

    def __init__(self, rules: Sequence[EligibilityRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[EligibilityRule, ...]:
        return self._rules

    def decide(self, link: LinkReference, options: ExtractionOptions) -> EligibilityDecision:
        for rule in self._rules:
            decision = rule(link, options)
            if decision is not None:
                return decision
        return FALLBACK_DECISION
