"""Link validation and enrichment."""

from .models import EnrichedLinkReference, PathConversion, ValidationOutcome, ValidationResult, ValidationSummary
from .resolver import LinkResolver

__all__ = [
    "EnrichedLinkReference",
    "LinkResolver",
    "PathConversion",
    "ValidationOutcome",
    "ValidationResult",
    "ValidationSummary",
]
