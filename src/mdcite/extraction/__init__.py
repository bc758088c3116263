from .eligibility import DEFAULT_RULES, EligibilityChain, EligibilityRule
from .engine import ExtractionEngine
from .models import (
    EligibilityDecision,
    ExtractedContentBlock,
    ExtractionOptions,
    ExtractionResult,
    ExtractionStats,
    ProcessedLinkEntry,
    SourceOccurrence,
)

__all__ = [
    "DEFAULT_RULES",
    "EligibilityChain",
    "EligibilityDecision",
    "EligibilityRule",
    "ExtractedContentBlock",
    "ExtractionEngine",
    "ExtractionOptions",
    "ExtractionResult",
    "ExtractionStats",
    "ProcessedLinkEntry",
    "SourceOccurrence",
]
